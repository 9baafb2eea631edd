import time

import pytest
from jose import JWTError, jwt

from progress_tracker.config import settings
from progress_tracker.domain.entities import Role
from progress_tracker.infrastructure.security import PasswordHasher, create_access_token, decode_token


def test_token_carries_id_and_role():
    claims = decode_token(create_access_token(42, Role.ADMIN))
    assert claims.user_id == 42
    assert claims.role is Role.ADMIN


def test_token_expires_after_a_week():
    token = create_access_token(1, "student")
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == "1"
    assert 7 * 86400 - 60 < payload["exp"] - time.time() <= 7 * 86400


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode({"sub": "1", "role": "admin"}, "not-the-secret", algorithm="HS256")
    with pytest.raises(JWTError):
        decode_token(forged)


def test_token_with_unknown_role_is_rejected():
    token = jwt.encode({"sub": "1", "role": "teacher"}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(JWTError):
        decode_token(token)


def test_password_hasher():
    hasher = PasswordHasher()
    hashed = hasher.hash("s3cret")
    assert hashed != "s3cret"
    assert hasher.verify("s3cret", hashed)
    assert not hasher.verify("wrong", hashed)
