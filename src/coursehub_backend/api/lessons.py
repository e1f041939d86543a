from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub_backend.database import get_db
from coursehub_backend.interface.lessons import LessonCompletionGet, LessonCreate, LessonGet, LessonUpdate
from coursehub_backend.permissions.auth import get_current_principal
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.lesson_service import LessonService

lesson_router = APIRouter()

@lesson_router.post("", response_model=LessonGet, status_code=status.HTTP_201_CREATED)
def create_lesson(permissions: Annotated[Principal, Depends(get_current_principal)], data: LessonCreate, db: Session = Depends(get_db)):
    return LessonService(db).create_lesson(permissions, data)

@lesson_router.get("/{lesson_id}", response_model=LessonGet)
def get_lesson(permissions: Annotated[Principal, Depends(get_current_principal)], lesson_id: str, db: Session = Depends(get_db)):
    return LessonService(db).get_lesson(permissions, lesson_id)

@lesson_router.patch("/{lesson_id}", response_model=LessonGet)
def update_lesson(permissions: Annotated[Principal, Depends(get_current_principal)], lesson_id: str, data: LessonUpdate, db: Session = Depends(get_db)):
    return LessonService(db).update_lesson(permissions, lesson_id, data)

@lesson_router.delete("/{lesson_id}", response_model=dict)
def delete_lesson(permissions: Annotated[Principal, Depends(get_current_principal)], lesson_id: str, db: Session = Depends(get_db)):
    LessonService(db).delete_lesson(permissions, lesson_id)
    return {"ok": True}

@lesson_router.post("/{lesson_id}/complete", response_model=LessonCompletionGet)
def complete_lesson(permissions: Annotated[Principal, Depends(get_current_principal)], lesson_id: str, db: Session = Depends(get_db)):
    completion, enrollment = LessonService(db).complete_lesson(permissions, lesson_id)
    return LessonCompletionGet(
        lesson_id=completion.lesson_id,
        completed_at=completion.completed_at,
        progress_percentage=enrollment.progress_percentage
    )
