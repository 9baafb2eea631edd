import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ....application.errors import ApplicationError
from ....application.use_cases.submit_progress import SubmitProgress
from ....infrastructure.db import get_db
from ....infrastructure.metrics import progress_upserts_total
from ....infrastructure.repositories import CourseRepository, ProgressRepository, StudentRepository
from ....infrastructure.security import TokenClaims
from ..authz import require_student
from ..errors import to_http
from ..schemas import ProgressOut, ProgressReq

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/progress", tags=["progress"])

@router.post("", response_model=ProgressOut, status_code=status.HTTP_201_CREATED)
def submit_progress(
    payload: ProgressReq,
    claims: TokenClaims = Depends(require_student),
    db: Session = Depends(get_db),
):
    student = StudentRepository(db).get_by_user_id(claims.user_id)
    if not student:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Student profile not found")
    uc = SubmitProgress(courses=CourseRepository(db), progress=ProgressRepository(db))
    try:
        row = uc.execute(student.id, payload.courseId, payload.percentage, payload.date)
    except ApplicationError as e:
        raise to_http(e)
    progress_upserts_total.inc()
    logger.info("progress_upserted", student_id=student.id, course_id=row.course_id, progress_id=row.id)
    return row
