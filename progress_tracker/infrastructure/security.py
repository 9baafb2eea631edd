from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError
from passlib.context import CryptContext

from ..config import settings
from ..domain.entities import Role

pwd = CryptContext(
    schemes=["bcrypt_sha256"],
    deprecated="auto",
    bcrypt_sha256__truncate_error=False,
)


class PasswordHasher:
    def hash(self, plain: str) -> str: return pwd.hash(plain)
    def verify(self, plain: str, hashed: str) -> bool: return pwd.verify(plain, hashed)


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: Role


def create_access_token(user_id: int, role: Role | str, days: int | None = None) -> str:
    days = settings.ACCESS_TOKEN_EXPIRE_DAYS if days is None else days
    exp = datetime.now(timezone.utc) + timedelta(days=days)
    payload = {"sub": str(user_id), "role": Role(role).value, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> TokenClaims:
    """Return the caller's id and role, or raise JWTError."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    sub = payload.get("sub")
    if not sub:
        raise JWTError("No subject")
    try:
        return TokenClaims(user_id=int(sub), role=Role(payload.get("role")))
    except ValueError as e:
        raise JWTError(str(e)) from e
