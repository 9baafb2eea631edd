from ..errors import InvalidCredentials
from ...domain.entities import User


class IUserLookup:
    def get_by_username(self, username: str) -> User | None: ...


class IPasswordVerifier:
    def verify(self, plain: str, hashed: str) -> bool: ...


class LoginUser:
    def __init__(self, repo: IUserLookup, hasher: IPasswordVerifier):
        self.repo = repo
        self.hasher = hasher

    def execute(self, username: str, password: str) -> User:
        # Unknown user and wrong password fail identically
        user = self.repo.get_by_username(username)
        if not user or not user.password_hash:
            raise InvalidCredentials("Invalid username or password")
        if not self.hasher.verify(password, user.password_hash):
            raise InvalidCredentials("Invalid username or password")
        return user
