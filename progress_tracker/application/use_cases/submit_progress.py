import math
from datetime import date, datetime, timezone

from ..errors import InvalidInput, NotEnrolled
from ...domain.entities import Course, Progress


def parse_percentage(value) -> float:
    """Accept a number or numeric string within [0, 100]."""
    if isinstance(value, bool):
        raise InvalidInput("percentage must be 0-100")
    try:
        pct = float(value)
    except (TypeError, ValueError):
        raise InvalidInput("percentage must be 0-100")
    if math.isnan(pct) or pct < 0 or pct > 100:
        raise InvalidInput("percentage must be 0-100")
    return pct


def parse_day(value: str | None) -> date | None:
    """``YYYY-MM-DD`` (or a full ISO timestamp) to a UTC calendar day."""
    if value is None or value == "":
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidInput("date must be YYYY-MM-DD")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def parse_course_id(value) -> int:
    if isinstance(value, bool):
        raise InvalidInput("Invalid course id")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput("Invalid course id")


class ICourseRepository:
    def list_for_student(self, student_id: int) -> list[Course]: ...


class IProgressRepository:
    def upsert(self, student_id: int, course_id: int, percentage: float, day: date | None = None) -> Progress: ...


class SubmitProgress:
    def __init__(self, courses: ICourseRepository, progress: IProgressRepository):
        self.courses = courses
        self.progress = progress

    def execute(self, student_id: int, course_id, percentage, day: str | None = None) -> Progress:
        if course_id is None or percentage is None:
            raise InvalidInput("courseId and percentage required")
        pct = parse_percentage(percentage)
        cid = parse_course_id(course_id)
        when = parse_day(day)
        enrolled = {c.id for c in self.courses.list_for_student(student_id)}
        if cid not in enrolled:
            raise NotEnrolled("Course not enrolled for this student")
        return self.progress.upsert(student_id, cid, pct, when)
