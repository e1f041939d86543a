from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from coursehub_backend.model.types import PaymentStatus

class CheckoutRequest(BaseModel):
    course_id: str
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None

class CheckoutResponse(BaseModel):
    payment_id: str
    session_id: str
    url: str

class PaymentGet(BaseModel):
    id: str
    student_id: str
    course_id: str
    amount: float
    currency: str
    status: PaymentStatus
    payment_provider: str
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class WebhookAck(BaseModel):
    received: bool = True
