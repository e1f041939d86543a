from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from coursehub_backend.model.types import EnrollmentStatus

class EnrollmentGet(BaseModel):
    id: str
    student_id: str
    course_id: str
    status: EnrollmentStatus
    enrolled_at: datetime
    progress_percentage: int
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class EnrollWithPaymentRequest(BaseModel):
    payment_id: str
