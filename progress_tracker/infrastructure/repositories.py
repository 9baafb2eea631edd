from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .models import CourseORM, ProgressORM, StudentORM, UserORM, student_courses, utcnow
from ..domain.entities import Course, Progress, Role, Student, User


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def user_to_domain(u: UserORM, with_hash: bool = False) -> User:
    return User(
        id=u.id,
        username=u.username,
        role=Role(u.role),
        password_hash=u.password_hash if with_hash else None,
    )


def student_to_domain(s: StudentORM, username: str | None = None) -> Student:
    return Student(id=s.id, user_id=s.user_id, display_name=s.display_name, username=username)


def course_to_domain(c: CourseORM) -> Course:
    return Course(id=c.id, name=c.name, color=c.color)


def progress_to_domain(p: ProgressORM, course: CourseORM | None = None) -> Progress:
    return Progress(
        id=p.id,
        student_id=p.student_id,
        course_id=p.course_id,
        percentage=float(p.percentage),
        recorded_at=as_utc(p.recorded_at),
        course_name=course.name if course else None,
        course_color=course.color if course else None,
    )


class UserRepository:
    def __init__(self, db: Session): self.db = db

    def get_by_username(self, username: str) -> User | None:
        row = self.db.query(UserORM).filter(UserORM.username == username).first()
        return user_to_domain(row, with_hash=True) if row else None

    def get_by_id(self, user_id: int) -> User | None:
        row = self.db.get(UserORM, user_id)
        return user_to_domain(row) if row else None

    def create(self, username: str, password_hash: str, role: Role) -> User:
        row = UserORM(username=username, password_hash=password_hash, role=Role(role).value)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return user_to_domain(row)

    def update(self, user_id: int, username: str | None = None, password_hash: str | None = None) -> User | None:
        row = self.db.get(UserORM, user_id)
        if not row:
            return None
        if username is not None: row.username = username
        if password_hash is not None: row.password_hash = password_hash
        self.db.commit(); self.db.refresh(row)
        return user_to_domain(row)

    def delete(self, user_id: int) -> bool:
        result = self.db.execute(delete(UserORM).where(UserORM.id == user_id))
        self.db.commit()
        return result.rowcount > 0


class StudentRepository:
    def __init__(self, db: Session): self.db = db

    def get_by_id(self, student_id: int) -> Student | None:
        row = self.db.get(StudentORM, student_id)
        return student_to_domain(row) if row else None

    def get_by_user_id(self, user_id: int) -> Student | None:
        row = self.db.query(StudentORM).filter(StudentORM.user_id == user_id).first()
        return student_to_domain(row) if row else None

    def list_all(self) -> list[Student]:
        q = (select(StudentORM, UserORM.username)
             .join(UserORM, StudentORM.user_id == UserORM.id)
             .order_by(StudentORM.display_name))
        return [student_to_domain(s, username) for s, username in self.db.execute(q).all()]

    def create_with_user(self, username: str, password_hash: str, display_name: str) -> Student:
        """Insert the login account and its student profile in one transaction."""
        user = UserORM(username=username, password_hash=password_hash, role=Role.STUDENT.value)
        try:
            self.db.add(user)
            self.db.flush()
            row = StudentORM(user_id=user.id, display_name=display_name)
            self.db.add(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return student_to_domain(row, username=user.username)

    def update(self, student_id: int, display_name: str | None = None) -> Student | None:
        row = self.db.get(StudentORM, student_id)
        if not row:
            return None
        if display_name is not None: row.display_name = display_name
        self.db.commit(); self.db.refresh(row)
        return student_to_domain(row)


class CourseRepository:
    def __init__(self, db: Session): self.db = db

    def existing_ids(self, course_ids: list[int]) -> set[int]:
        if not course_ids:
            return set()
        q = select(CourseORM.id).where(CourseORM.id.in_(set(course_ids)))
        return set(self.db.execute(q).scalars().all())

    def get_by_name(self, name: str) -> Course | None:
        row = self.db.query(CourseORM).filter(CourseORM.name == name).first()
        return course_to_domain(row) if row else None

    def list_all(self) -> list[Course]:
        rows = self.db.query(CourseORM).order_by(CourseORM.name).all()
        return [course_to_domain(r) for r in rows]

    def list_for_student(self, student_id: int) -> list[Course]:
        q = (select(CourseORM)
             .join(student_courses, CourseORM.id == student_courses.c.course_id)
             .where(student_courses.c.student_id == student_id)
             .order_by(CourseORM.name))
        return [course_to_domain(r) for r in self.db.execute(q).scalars().all()]

    def create(self, name: str, color: str | None = None) -> Course:
        row = CourseORM(name=name, color=color or None)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return course_to_domain(row)

    def update(self, course_id: int, name: str | None = None, color: str | None = None) -> Course | None:
        row = self.db.get(CourseORM, course_id)
        if not row:
            return None
        if name is not None: row.name = name
        if color is not None: row.color = color
        self.db.commit(); self.db.refresh(row)
        return course_to_domain(row)

    def delete(self, course_id: int) -> bool:
        result = self.db.execute(delete(CourseORM).where(CourseORM.id == course_id))
        self.db.commit()
        return result.rowcount > 0

    def enroll(self, student_id: int, course_id: int) -> None:
        exists = self.db.execute(
            select(student_courses.c.student_id).where(
                student_courses.c.student_id == student_id,
                student_courses.c.course_id == course_id,
            )
        ).first()
        if not exists:
            self.db.execute(student_courses.insert().values(student_id=student_id, course_id=course_id))
        self.db.commit()

    def set_for_student(self, student_id: int, course_ids: list[int]) -> None:
        """Replace the student's enrollment set."""
        try:
            self.db.execute(delete(student_courses).where(student_courses.c.student_id == student_id))
            for course_id in dict.fromkeys(course_ids):
                self.db.execute(student_courses.insert().values(student_id=student_id, course_id=course_id))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class ProgressRepository:
    def __init__(self, db: Session): self.db = db

    def list_for_student(self, student_id: int) -> list[Progress]:
        q = (select(ProgressORM, CourseORM)
             .join(CourseORM, ProgressORM.course_id == CourseORM.id)
             .where(ProgressORM.student_id == student_id)
             .order_by(ProgressORM.recorded_at.asc(), ProgressORM.id.asc()))
        return [progress_to_domain(p, c) for p, c in self.db.execute(q).all()]

    def insert(self, student_id: int, course_id: int, percentage: float) -> Progress:
        """Plain insert stamped with the current time; no same-day collapsing."""
        row = ProgressORM(student_id=student_id, course_id=course_id, percentage=percentage, recorded_at=utcnow())
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return progress_to_domain(row)

    def upsert(self, student_id: int, course_id: int, percentage: float, day: date | None = None) -> Progress:
        """Keep at most one row per (student, course, UTC day).

        Rows recorded on ``day`` are updated in place; when none exist a new row
        is inserted at noon UTC of that day. Update and insert share one
        transaction but nothing locks the key, so two concurrent first writes
        for the same day can still both insert.
        """
        day = day or utcnow().date()
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        end = start + timedelta(days=1)
        rows = (self.db.query(ProgressORM)
                .filter(ProgressORM.student_id == student_id,
                        ProgressORM.course_id == course_id,
                        ProgressORM.recorded_at >= start,
                        ProgressORM.recorded_at < end)
                .order_by(ProgressORM.id)
                .all())
        try:
            if rows:
                for row in rows:
                    row.percentage = percentage
                target = rows[0]
            else:
                target = ProgressORM(
                    student_id=student_id,
                    course_id=course_id,
                    percentage=percentage,
                    recorded_at=start.replace(hour=12),
                )
                self.db.add(target)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(target)
        return progress_to_domain(target)

    def delete(self, progress_id: int, student_id: int | None = None) -> bool:
        stmt = delete(ProgressORM).where(ProgressORM.id == progress_id)
        if student_id is not None:
            stmt = stmt.where(ProgressORM.student_id == student_id)
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount > 0
