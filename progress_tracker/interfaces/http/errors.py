from fastapi import HTTPException, status

from ...application.errors import (
    ApplicationError,
    InvalidCredentials,
    InvalidInput,
    NotEnrolled,
    NotFound,
    UsernameTaken,
)

_STATUS = {
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    UsernameTaken: status.HTTP_400_BAD_REQUEST,
    NotEnrolled: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
}


def to_http(e: ApplicationError) -> HTTPException:
    code = _STATUS.get(type(e), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=str(e))
