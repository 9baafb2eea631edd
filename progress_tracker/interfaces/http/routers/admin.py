import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from ....application.errors import ApplicationError
from ....application.use_cases.register_student import RegisterStudent
from ....application.use_cases.update_user import UpdateUser
from ....infrastructure.cache import COURSES_KEY, delete_cache, get_cache, set_cache
from ....infrastructure.db import get_db
from ....infrastructure.metrics import cache_hits_total, cache_misses_total
from ....infrastructure.repositories import CourseRepository, StudentRepository, UserRepository, ProgressRepository
from ....infrastructure.security import PasswordHasher
from ..authz import require_admin
from ..errors import to_http
from ..schemas import (
    CourseCreate,
    CourseOut,
    CourseUpdate,
    EnrollReq,
    EnrollResp,
    StudentCreate,
    StudentDetailOut,
    StudentOut,
    StudentUpdate,
    UserOut,
    UserUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])

def _detail(db: Session, student_id: int) -> StudentDetailOut:
    student = StudentRepository(db).get_by_id(student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    courses = CourseRepository(db).list_for_student(student_id)
    user = UserRepository(db).get_by_id(student.user_id)
    return StudentDetailOut(
        id=student.id,
        user_id=student.user_id,
        display_name=student.display_name,
        username=user.username if user else None,
        courses=[CourseOut.model_validate(c) for c in courses],
    )

def _check_course_ids(db: Session, course_ids: list[int]) -> None:
    known = CourseRepository(db).existing_ids(course_ids)
    unknown = sorted(set(course_ids) - known)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown course id(s): {unknown}")

# --- Students:

@router.get("/students", response_model=list[StudentOut])
def list_students(db: Session = Depends(get_db)):
    return StudentRepository(db).list_all()

@router.post("/students", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)):
    uc = RegisterStudent(users=UserRepository(db), students=StudentRepository(db), hasher=PasswordHasher())
    try:
        student = uc.execute(payload.username, payload.password, payload.displayName)
    except ApplicationError as e:
        raise to_http(e)
    logger.info("student_created", student_id=student.id, user_id=student.user_id)
    return student

@router.get("/students/{student_id}", response_model=StudentDetailOut)
def get_student(student_id: int, db: Session = Depends(get_db)):
    return _detail(db, student_id)

@router.patch("/students/{student_id}", response_model=StudentDetailOut)
def update_student(student_id: int, payload: StudentUpdate, db: Session = Depends(get_db)):
    students = StudentRepository(db)
    if not students.get_by_id(student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    if payload.courseIds is not None:
        _check_course_ids(db, payload.courseIds)
    if payload.displayName is not None:
        students.update(student_id, display_name=payload.displayName)
    if payload.courseIds is not None:
        CourseRepository(db).set_for_student(student_id, payload.courseIds)
    return _detail(db, student_id)

@router.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: int, db: Session = Depends(get_db)):
    student = StudentRepository(db).get_by_id(student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    # profile, enrollments and progress cascade from the user row
    UserRepository(db).delete(student.user_id)
    logger.info("student_deleted", student_id=student_id, user_id=student.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/students/{student_id}/progress/{progress_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_progress(student_id: int, progress_id: int, db: Session = Depends(get_db)):
    if not ProgressRepository(db).delete(progress_id, student_id=student_id):
        raise HTTPException(status_code=404, detail="Progress entry not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/students/{student_id}/courses", response_model=EnrollResp)
def set_student_courses(student_id: int, payload: EnrollReq, db: Session = Depends(get_db)):
    if not StudentRepository(db).get_by_id(student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    _check_course_ids(db, payload.courseIds)
    courses = CourseRepository(db)
    courses.set_for_student(student_id, payload.courseIds)
    return EnrollResp(studentId=student_id, courses=[CourseOut.model_validate(c) for c in courses.list_for_student(student_id)])

# --- Courses:

@router.get("/courses", response_model=list[CourseOut])
def list_courses(db: Session = Depends(get_db)):
    cached = get_cache(COURSES_KEY)
    if cached is not None:
        cache_hits_total.inc()
        return cached
    cache_misses_total.inc()
    result = [CourseOut.model_validate(c) for c in CourseRepository(db).list_all()]
    set_cache(COURSES_KEY, [r.model_dump() for r in result])
    return result

@router.post("/courses", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)):
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="name required")
    course = CourseRepository(db).create(name, payload.color)
    delete_cache(COURSES_KEY)
    return course

@router.patch("/courses/{course_id}", response_model=CourseOut)
def update_course(course_id: int, payload: CourseUpdate, db: Session = Depends(get_db)):
    course = CourseRepository(db).update(course_id, name=payload.name, color=payload.color)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    delete_cache(COURSES_KEY)
    return course

@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: int, db: Session = Depends(get_db)):
    if not CourseRepository(db).delete(course_id):
        raise HTTPException(status_code=404, detail="Course not found")
    delete_cache(COURSES_KEY)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- Users:

@router.patch("/users/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    uc = UpdateUser(repo=UserRepository(db), hasher=PasswordHasher())
    try:
        user = uc.execute(user_id, username=payload.username, password=payload.password)
    except ApplicationError as e:
        raise to_http(e)
    return UserOut(id=user.id, username=user.username, role=user.role.value)
