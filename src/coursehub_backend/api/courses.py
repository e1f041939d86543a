from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub_backend.database import get_db
from coursehub_backend.interface.assignments import AssignmentGet
from coursehub_backend.interface.base import ListQuery
from coursehub_backend.interface.courses import CourseCreate, CourseGet, CourseList, CourseUpdate
from coursehub_backend.interface.enrollments import EnrollmentGet, EnrollWithPaymentRequest
from coursehub_backend.interface.lessons import LessonList
from coursehub_backend.permissions.auth import get_current_principal, get_current_student, get_optional_principal
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.assignment_service import AssignmentService
from coursehub_backend.services.course_service import CourseService
from coursehub_backend.services.enrollment_service import EnrollmentService
from coursehub_backend.services.lesson_service import LessonService

course_router = APIRouter()

@course_router.get("", response_model=List[CourseList])
def list_courses(params: ListQuery = Depends(), db: Session = Depends(get_db)):
    return CourseService(db).list_published(skip=params.skip, limit=params.limit)

@course_router.post("", response_model=CourseGet, status_code=status.HTTP_201_CREATED)
def create_course(permissions: Annotated[Principal, Depends(get_current_principal)], data: CourseCreate, db: Session = Depends(get_db)):
    return CourseService(db).create_course(permissions, data)

@course_router.get("/mine", response_model=List[CourseList])
def list_my_courses(permissions: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)):
    return CourseService(db).list_own(permissions)

@course_router.get("/{course_id}", response_model=CourseGet)
def get_course(permissions: Annotated[Optional[Principal], Depends(get_optional_principal)], course_id: str, db: Session = Depends(get_db)):
    return CourseService(db).get_course(permissions, course_id)

@course_router.get("/{course_id}/content", response_model=CourseGet)
def get_course_content(permissions: Annotated[Principal, Depends(get_current_principal)], course_id: str, db: Session = Depends(get_db)):
    return CourseService(db).get_course_content(permissions, course_id)

@course_router.patch("/{course_id}", response_model=CourseGet)
def update_course(permissions: Annotated[Principal, Depends(get_current_principal)], course_id: str, data: CourseUpdate, db: Session = Depends(get_db)):
    return CourseService(db).update_course(permissions, course_id, data)

@course_router.delete("/{course_id}", response_model=dict)
def delete_course(permissions: Annotated[Principal, Depends(get_current_principal)], course_id: str, db: Session = Depends(get_db)):
    CourseService(db).delete_course(permissions, course_id)
    return {"ok": True}

@course_router.post("/{course_id}/publish", response_model=CourseGet)
def publish_course(permissions: Annotated[Principal, Depends(get_current_principal)], course_id: str, db: Session = Depends(get_db)):
    return CourseService(db).set_published(permissions, course_id, True)

@course_router.post("/{course_id}/unpublish", response_model=CourseGet)
def unpublish_course(permissions: Annotated[Principal, Depends(get_current_principal)], course_id: str, db: Session = Depends(get_db)):
    return CourseService(db).set_published(permissions, course_id, False)

@course_router.post("/{course_id}/enroll", response_model=EnrollmentGet, status_code=status.HTTP_201_CREATED)
def enroll(permissions: Annotated[Principal, Depends(get_current_student)], course_id: str, db: Session = Depends(get_db)):
    return EnrollmentService(db).enroll(course_id, permissions.user_id)

@course_router.post("/{course_id}/enroll-with-payment", response_model=EnrollmentGet, status_code=status.HTTP_201_CREATED)
def enroll_with_payment(
    permissions: Annotated[Principal, Depends(get_current_student)],
    course_id: str,
    data: EnrollWithPaymentRequest,
    db: Session = Depends(get_db)
):
    return EnrollmentService(db).enroll_with_payment(course_id, permissions.user_id, data.payment_id)

@course_router.get("/{course_id}/lessons", response_model=List[LessonList])
def list_course_lessons(permissions: Annotated[Principal, Depends(get_current_principal)], course_id: str, db: Session = Depends(get_db)):
    return LessonService(db).list_course_lessons(permissions, course_id)

@course_router.get("/{course_id}/assignments", response_model=List[AssignmentGet])
def list_course_assignments(permissions: Annotated[Principal, Depends(get_current_principal)], course_id: str, db: Session = Depends(get_db)):
    return AssignmentService(db).list_course_assignments(permissions, course_id)
