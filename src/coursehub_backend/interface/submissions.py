from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from coursehub_backend.model.types import SubmissionStatus, SubmissionType

class SubmissionCreate(BaseModel):
    assignment_id: str
    submission_type: SubmissionType
    file_url: Optional[str] = None
    link_url: Optional[str] = None

class SubmissionGet(BaseModel):
    id: str
    assignment_id: str
    student_id: str
    submission_type: SubmissionType
    file_url: Optional[str] = None
    link_url: Optional[str] = None
    submitted_at: datetime
    status: SubmissionStatus

    model_config = ConfigDict(from_attributes=True)
