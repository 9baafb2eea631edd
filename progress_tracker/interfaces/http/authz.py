from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from ...domain.entities import Role
from ...infrastructure.repositories import StudentRepository
from ...infrastructure.security import TokenClaims, decode_token

bearer = HTTPBearer(auto_error=False)

def get_claims(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> TokenClaims:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing or invalid authorization")
    try:
        return decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

def require_admin(claims: TokenClaims = Depends(get_claims)) -> TokenClaims:
    if claims.role is Role.ADMIN:
        return claims
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin only")

def require_student(claims: TokenClaims = Depends(get_claims)) -> TokenClaims:
    if claims.role is Role.STUDENT:
        return claims
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Students only")

def ensure_can_view_student(claims: TokenClaims, student_id: int, db: Session) -> None:
    """Admins see everyone; a student only their own record."""
    if claims.role is Role.ADMIN:
        return
    if claims.role is Role.STUDENT:
        own = StudentRepository(db).get_by_user_id(claims.user_id)
        if own and own.id == student_id:
            return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to view this student")
