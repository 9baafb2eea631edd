import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ....application.errors import InvalidCredentials
from ....application.use_cases.login_user import LoginUser
from ....config import settings
from ....domain.entities import Role
from ....infrastructure.db import get_db
from ....infrastructure.metrics import login_attempts_total
from ....infrastructure.rate_limit import limiter
from ....infrastructure.repositories import CourseRepository, StudentRepository, UserRepository
from ....infrastructure.security import PasswordHasher, TokenClaims, create_access_token
from ..authz import get_claims
from ..errors import to_http
from ..schemas import CourseOut, LoginReq, MeResp, TokenResp

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/login", response_model=TokenResp)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(request: Request, payload: LoginReq, db: Session = Depends(get_db)):
    if not payload.username or not payload.password:
        raise HTTPException(status_code=400, detail="Username and password required")
    uc = LoginUser(repo=UserRepository(db), hasher=PasswordHasher())
    try:
        user = uc.execute(payload.username, payload.password)
    except InvalidCredentials as e:
        login_attempts_total.labels(outcome="rejected").inc()
        logger.info("login_rejected", username=payload.username)
        raise to_http(e)
    login_attempts_total.labels(outcome="ok").inc()
    logger.info("login_ok", user_id=user.id, role=user.role.value)
    token = create_access_token(user.id, user.role)
    return TokenResp(token=token, userId=user.id, role=user.role.value)


@router.get("/me", response_model=MeResp, response_model_exclude_none=True)
def me(claims: TokenClaims = Depends(get_claims), db: Session = Depends(get_db)):
    user = UserRepository(db).get_by_id(claims.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    resp = MeResp(id=user.id, username=user.username, role=user.role.value)
    if user.role is Role.STUDENT:
        student = StudentRepository(db).get_by_user_id(user.id)
        if student:
            resp.studentId = student.id
            resp.displayName = student.display_name
            resp.courses = [CourseOut.model_validate(c) for c in CourseRepository(db).list_for_student(student.id)]
    return resp
