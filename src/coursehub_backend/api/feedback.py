from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub_backend.database import get_db
from coursehub_backend.interface.feedback import FeedbackCreate, FeedbackGet, FeedbackUpdate
from coursehub_backend.permissions.auth import get_current_principal
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.feedback_service import FeedbackService

feedback_router = APIRouter()

@feedback_router.post("", response_model=FeedbackGet, status_code=status.HTTP_201_CREATED)
def create_feedback(permissions: Annotated[Principal, Depends(get_current_principal)], data: FeedbackCreate, db: Session = Depends(get_db)):
    return FeedbackService(db).create_feedback(permissions, data)

@feedback_router.get("/{feedback_id}", response_model=FeedbackGet)
def get_feedback(permissions: Annotated[Principal, Depends(get_current_principal)], feedback_id: str, db: Session = Depends(get_db)):
    return FeedbackService(db).get_feedback(permissions, feedback_id)

@feedback_router.patch("/{feedback_id}", response_model=FeedbackGet)
def update_feedback(permissions: Annotated[Principal, Depends(get_current_principal)], feedback_id: str, data: FeedbackUpdate, db: Session = Depends(get_db)):
    return FeedbackService(db).update_feedback(permissions, feedback_id, data)
