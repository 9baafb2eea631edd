"""Populate a fresh database with an admin, the default courses and demo students.

Safe to re-run: existing users and courses are reused and enrollments are only
added when missing.
"""

import structlog
import typer

from .config import settings
from .domain.entities import Role
from .infrastructure.db import SessionLocal, engine
from .infrastructure.models import init_db
from .infrastructure.repositories import CourseRepository, StudentRepository, UserRepository
from .infrastructure.security import PasswordHasher

logger = structlog.get_logger(__name__)

COURSES = [
    ("History", "#2196F3"),
    ("Math", "#4CAF50"),
    ("Science", "#FF9800"),
    ("English", "#9C27B0"),
    ("Computer Science", "#00BCD4"),
    ("Spanish", "#795548"),
    ("Biology", "#8BC34A"),
    ("Art", "#E91E63"),
]

STUDENTS = [
    ("evelyn", "Evelyn", ["History", "Math", "Science", "English"]),
    ("amandalynn", "Amanda Lynn", ["Math", "Computer Science", "Spanish"]),
    ("henry", "Henry", ["English", "Biology", "Art"]),
    ("mali", "Mali", ["English", "Biology", "Art"]),
]

app = typer.Typer(help="Seed the student progress database.", add_completion=False)


def seed_database(db, admin_username: str, admin_password: str, with_students: bool = True) -> dict:
    """Create missing seed rows and return how many of each were added."""
    hasher = PasswordHasher()
    users = UserRepository(db)
    students = StudentRepository(db)
    courses = CourseRepository(db)
    created = {"admins": 0, "courses": 0, "students": 0}

    if users.get_by_username(admin_username) is None:
        users.create(admin_username, hasher.hash(admin_password), Role.ADMIN)
        created["admins"] += 1
        logger.info("seed_admin_created", username=admin_username)

    course_ids: dict[str, int] = {}
    for name, color in COURSES:
        course = courses.get_by_name(name)
        if course is None:
            course = courses.create(name, color)
            created["courses"] += 1
        course_ids[name] = course.id

    if not with_students:
        return created

    for username, display_name, enrolled in STUDENTS:
        user = users.get_by_username(username)
        if user is None:
            student = students.create_with_user(username, hasher.hash(username + "123"), display_name)
            created["students"] += 1
            logger.info("seed_student_created", username=username)
        else:
            student = students.get_by_user_id(user.id)
            if student is None:
                continue
        for name in enrolled:
            courses.enroll(student.id, course_ids[name])
    return created


@app.command()
def main(
    admin_username: str = typer.Option(settings.SEED_ADMIN_USERNAME, help="Admin login to ensure."),
    admin_password: str = typer.Option(settings.SEED_ADMIN_PASSWORD, help="Password for a newly created admin."),
    students: bool = typer.Option(True, "--students/--no-students", help="Also create demo students."),
) -> None:
    init_db(engine)
    db = SessionLocal()
    try:
        created = seed_database(db, admin_username, admin_password, with_students=students)
    finally:
        db.close()
    typer.echo(
        f"Seed complete: {created['admins']} admin(s), {created['courses']} course(s), "
        f"{created['students']} student(s) added."
    )


if __name__ == "__main__":
    app()
