from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


student_courses = Table(
    "student_courses",
    Base.metadata,
    Column("student_id", ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
    Column("course_id", ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
)


class UserORM(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('student', 'admin')", name="ck_users_role"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )

    student: Mapped["StudentORM | None"] = relationship(
        "StudentORM",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, username={self.username!r}, role={self.role!r})"


class StudentORM(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )

    user: Mapped["UserORM"] = relationship("UserORM", back_populates="student")
    courses: Mapped[list["CourseORM"]] = relationship(
        "CourseORM",
        secondary=student_courses,
        back_populates="students",
        passive_deletes=True,
    )
    progress: Mapped[list["ProgressORM"]] = relationship(
        "ProgressORM",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"StudentORM(id={self.id!r}, display_name={self.display_name!r})"


class CourseORM(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )

    students: Mapped[list["StudentORM"]] = relationship(
        "StudentORM",
        secondary=student_courses,
        back_populates="courses",
        passive_deletes=True,
    )
    progress: Mapped[list["ProgressORM"]] = relationship(
        "ProgressORM",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"CourseORM(id={self.id!r}, name={self.name!r})"


class ProgressORM(Base):
    __tablename__ = "progress"
    __table_args__ = (
        CheckConstraint("percentage >= 0 AND percentage <= 100", name="ck_progress_percentage"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    percentage: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), default=utcnow
    )

    student: Mapped["StudentORM"] = relationship("StudentORM", back_populates="progress")
    course: Mapped["CourseORM"] = relationship("CourseORM", back_populates="progress")

    def __repr__(self) -> str:
        return (
            f"ProgressORM(id={self.id!r}, student_id={self.student_id!r}, "
            f"course_id={self.course_id!r}, percentage={self.percentage!r})"
        )


def init_db(bind) -> None:
    Base.metadata.create_all(bind=bind)


__all__ = [
    "Base",
    "UserORM",
    "StudentORM",
    "CourseORM",
    "ProgressORM",
    "student_courses",
    "utcnow",
    "init_db",
]
