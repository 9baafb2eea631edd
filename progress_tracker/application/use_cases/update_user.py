from sqlalchemy.exc import IntegrityError

from ..errors import InvalidInput, NotFound, UsernameTaken
from ...domain.entities import User


class IUserRepository:
    def get_by_id(self, user_id: int) -> User | None: ...
    def get_by_username(self, username: str) -> User | None: ...
    def update(self, user_id: int, username: str | None = None, password_hash: str | None = None) -> User | None: ...


class IPasswordHasher:
    def hash(self, plain: str) -> str: ...


class UpdateUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, user_id: int, username: str | None = None, password: str | None = None) -> User:
        if not self.repo.get_by_id(user_id):
            raise NotFound("User not found")
        if username is not None:
            username = username.strip()
            if not username:
                raise InvalidInput("Username cannot be empty")
            taken = self.repo.get_by_username(username)
            if taken and taken.id != user_id:
                raise UsernameTaken("Username already exists")
        # an empty password means "leave unchanged"
        pwd_hash = self.hasher.hash(password) if password else None
        try:
            updated = self.repo.update(user_id, username=username, password_hash=pwd_hash)
        except IntegrityError as e:
            raise UsernameTaken("Username already exists") from e
        if not updated:
            raise NotFound("User not found")
        return updated
