from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....infrastructure.db import get_db
from ....infrastructure.repositories import CourseRepository, ProgressRepository
from ....infrastructure.security import TokenClaims
from ..authz import ensure_can_view_student, get_claims
from ..schemas import CourseOut, ProgressItem

router = APIRouter(prefix="/api/students", tags=["students"])

@router.get("/{student_id}/courses", response_model=list[CourseOut])
def student_courses(student_id: int, claims: TokenClaims = Depends(get_claims), db: Session = Depends(get_db)):
    ensure_can_view_student(claims, student_id, db)
    return CourseRepository(db).list_for_student(student_id)

@router.get("/{student_id}/progress", response_model=list[ProgressItem])
def student_progress(student_id: int, claims: TokenClaims = Depends(get_claims), db: Session = Depends(get_db)):
    ensure_can_view_student(claims, student_id, db)
    return ProgressRepository(db).list_for_student(student_id)
