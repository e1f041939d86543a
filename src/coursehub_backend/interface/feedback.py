from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator
from coursehub_backend.interface.base import BaseEntityGet, reject_null

class FeedbackCreate(BaseModel):
    submission_id: str
    comment: str
    rating: Optional[int] = None

class FeedbackGet(BaseEntityGet):
    id: str
    submission_id: str
    instructor_id: str
    comment: str
    rating: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class FeedbackUpdate(BaseModel):
    comment: Optional[str] = None
    rating: Optional[int] = None

    @field_validator('comment')
    @classmethod
    def comment_not_null(cls, value):
        return reject_null(value)
