from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from coursehub_backend.interface.base import BaseEntityGet, reject_null
from coursehub_backend.model.types import SubmissionType

class AssignmentCreate(BaseModel):
    course_id: str
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    submission_type: SubmissionType
    deadline: Optional[datetime] = None

class AssignmentGet(BaseEntityGet):
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    submission_type: SubmissionType
    deadline: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    submission_type: Optional[SubmissionType] = None
    deadline: Optional[datetime] = None

    @field_validator('title', 'submission_type')
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)
