from sqlalchemy.exc import IntegrityError

from ..errors import InvalidInput, UsernameTaken
from ...domain.entities import Student, User


class IUserRepository:
    def get_by_username(self, username: str) -> User | None: ...


class IStudentRepository:
    def create_with_user(self, username: str, password_hash: str, display_name: str) -> Student: ...


class IPasswordHasher:
    def hash(self, plain: str) -> str: ...


class RegisterStudent:
    """Create a student login together with its profile."""

    def __init__(self, users: IUserRepository, students: IStudentRepository, hasher: IPasswordHasher):
        self.users = users
        self.students = students
        self.hasher = hasher

    def execute(self, username: str, password: str, display_name: str) -> Student:
        username = (username or "").strip()
        display_name = (display_name or "").strip()
        if not username or not password or not display_name:
            raise InvalidInput("username, password, and displayName required")
        if self.users.get_by_username(username):
            raise UsernameTaken("Username already exists")
        pwd_hash = self.hasher.hash(password)
        try:
            return self.students.create_with_user(username, pwd_hash, display_name)
        except IntegrityError as e:
            # lost a race with a concurrent insert of the same username
            raise UsernameTaken("Username already exists") from e
