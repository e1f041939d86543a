from typing import Annotated, List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursehub_backend.database import get_db
from coursehub_backend.interface.enrollments import EnrollmentGet
from coursehub_backend.permissions.auth import get_current_student
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.enrollment_service import EnrollmentService

student_router = APIRouter()

@student_router.get("/enrollments", response_model=List[EnrollmentGet])
def student_list_enrollments(permissions: Annotated[Principal, Depends(get_current_student)], db: Session = Depends(get_db)):
    return EnrollmentService(db).list_for_student(permissions.user_id)
