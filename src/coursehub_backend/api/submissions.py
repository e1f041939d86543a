from typing import Annotated, List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub_backend.database import get_db
from coursehub_backend.interface.feedback import FeedbackGet
from coursehub_backend.interface.submissions import SubmissionCreate, SubmissionGet
from coursehub_backend.permissions.auth import get_current_principal
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.feedback_service import FeedbackService
from coursehub_backend.services.submission_service import SubmissionService

submission_router = APIRouter()

@submission_router.post("", response_model=SubmissionGet, status_code=status.HTTP_201_CREATED)
def submit(permissions: Annotated[Principal, Depends(get_current_principal)], data: SubmissionCreate, db: Session = Depends(get_db)):
    return SubmissionService(db).submit(permissions, data)

@submission_router.get("/{submission_id}", response_model=SubmissionGet)
def get_submission(permissions: Annotated[Principal, Depends(get_current_principal)], submission_id: str, db: Session = Depends(get_db)):
    return SubmissionService(db).get_submission(permissions, submission_id)

@submission_router.get("/{submission_id}/feedback", response_model=List[FeedbackGet])
def list_feedback(permissions: Annotated[Principal, Depends(get_current_principal)], submission_id: str, db: Session = Depends(get_db)):
    return FeedbackService(db).list_submission_feedback(permissions, submission_id)
