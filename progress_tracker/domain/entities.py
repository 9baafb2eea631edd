from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


@dataclass(frozen=True)
class User:
    id: int
    username: str
    role: Role
    password_hash: str | None = None


@dataclass(frozen=True)
class Student:
    id: int
    user_id: int
    display_name: str
    username: str | None = None


@dataclass(frozen=True)
class Course:
    id: int
    name: str
    color: str | None = None


@dataclass(frozen=True)
class Progress:
    id: int
    student_id: int
    course_id: int
    percentage: float
    recorded_at: datetime
    course_name: str | None = None
    course_color: str | None = None
