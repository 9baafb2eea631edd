from datetime import datetime
from typing import Union

from pydantic import AliasChoices, BaseModel, Field

Scalar = Union[int, float, str, None]
HEX_COLOR = r"^#(?:[0-9A-Fa-f]{3}){1,2}$"


class LoginReq(BaseModel):
    username: str | None = None
    password: str | None = None

class TokenResp(BaseModel):
    token: str
    userId: int
    role: str


class CourseOut(BaseModel):
    id: int
    name: str
    color: str | None = None
    class Config: from_attributes = True

class CourseCreate(BaseModel):
    name: str | None = None
    color: str | None = Field(default=None, pattern=HEX_COLOR)

class CourseUpdate(BaseModel):
    name: str | None = None
    color: str | None = Field(default=None, pattern=HEX_COLOR)


class MeResp(BaseModel):
    id: int
    username: str
    role: str
    studentId: int | None = None
    displayName: str | None = None
    courses: list[CourseOut] | None = None


class StudentOut(BaseModel):
    id: int
    user_id: int
    display_name: str
    username: str | None = None
    class Config: from_attributes = True

class StudentDetailOut(StudentOut):
    courses: list[CourseOut] = []

class StudentCreate(BaseModel):
    username: str | None = None
    password: str | None = None
    displayName: str | None = None

class StudentUpdate(BaseModel):
    displayName: str | None = None
    courseIds: list[int] | None = None

class EnrollReq(BaseModel):
    courseIds: list[int]

class EnrollResp(BaseModel):
    studentId: int
    courses: list[CourseOut]


class UserUpdate(BaseModel):
    username: str | None = None
    password: str | None = None

class UserOut(BaseModel):
    id: int
    username: str
    role: str
    class Config: from_attributes = True


class ProgressReq(BaseModel):
    courseId: Scalar = None
    percentage: Scalar = None
    date: str | None = None

class ProgressOut(BaseModel):
    id: int
    student_id: int
    course_id: int
    percentage: float
    recorded_at: datetime
    class Config: from_attributes = True

class ProgressItem(ProgressOut):
    course_name: str | None = None
    course_color: str | None = None


class AskReq(BaseModel):
    prompt: str | None = Field(default=None, validation_alias=AliasChoices("prompt", "question"))

class AskResp(BaseModel):
    reply: str
