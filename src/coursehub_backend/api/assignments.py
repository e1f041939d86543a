from typing import Annotated, List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub_backend.database import get_db
from coursehub_backend.interface.assignments import AssignmentCreate, AssignmentGet, AssignmentUpdate
from coursehub_backend.interface.submissions import SubmissionGet
from coursehub_backend.permissions.auth import get_current_principal
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.assignment_service import AssignmentService
from coursehub_backend.services.submission_service import SubmissionService

assignment_router = APIRouter()

@assignment_router.post("", response_model=AssignmentGet, status_code=status.HTTP_201_CREATED)
def create_assignment(permissions: Annotated[Principal, Depends(get_current_principal)], data: AssignmentCreate, db: Session = Depends(get_db)):
    return AssignmentService(db).create_assignment(permissions, data)

@assignment_router.get("/{assignment_id}", response_model=AssignmentGet)
def get_assignment(permissions: Annotated[Principal, Depends(get_current_principal)], assignment_id: str, db: Session = Depends(get_db)):
    return AssignmentService(db).get_assignment(permissions, assignment_id)

@assignment_router.patch("/{assignment_id}", response_model=AssignmentGet)
def update_assignment(permissions: Annotated[Principal, Depends(get_current_principal)], assignment_id: str, data: AssignmentUpdate, db: Session = Depends(get_db)):
    return AssignmentService(db).update_assignment(permissions, assignment_id, data)

@assignment_router.delete("/{assignment_id}", response_model=dict)
def delete_assignment(permissions: Annotated[Principal, Depends(get_current_principal)], assignment_id: str, db: Session = Depends(get_db)):
    AssignmentService(db).delete_assignment(permissions, assignment_id)
    return {"ok": True}

@assignment_router.get("/{assignment_id}/submissions", response_model=List[SubmissionGet])
def list_submissions(permissions: Annotated[Principal, Depends(get_current_principal)], assignment_id: str, db: Session = Depends(get_db)):
    return SubmissionService(db).list_assignment_submissions(permissions, assignment_id)
