import logging
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.orm import Session

from coursehub_backend.api.exceptions import BadRequestException
from coursehub_backend.database import get_db
from coursehub_backend.interface.enrollments import EnrollmentGet
from coursehub_backend.interface.payments import CheckoutRequest, CheckoutResponse, PaymentGet, WebhookAck
from coursehub_backend.permissions.auth import get_current_principal, get_current_student
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.services.enrollment_service import EnrollmentService
from coursehub_backend.services.payment_gateway import PaymentGateway, PaymentGatewayError, StripePaymentGateway
from coursehub_backend.services.payment_service import PaymentService
from coursehub_backend.settings import settings

logger = logging.getLogger(__name__)

payment_router = APIRouter()

def get_payment_gateway() -> PaymentGateway:
    return StripePaymentGateway(
        api_key=settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        timeout=settings.PAYMENT_GATEWAY_TIMEOUT
    )

@payment_router.post("/create-checkout", response_model=CheckoutResponse)
async def create_checkout(
    permissions: Annotated[Principal, Depends(get_current_student)],
    data: CheckoutRequest,
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    db: Session = Depends(get_db)
):
    success_url = data.success_url or f"{settings.FRONTEND_URL}/payment/success?session_id={{CHECKOUT_SESSION_ID}}"
    cancel_url = data.cancel_url or f"{settings.FRONTEND_URL}/courses/{data.course_id}"

    payment, session = await PaymentService(db, gateway).create_checkout_session(
        data.course_id, permissions.user_id, success_url, cancel_url
    )
    return CheckoutResponse(payment_id=payment.id, session_id=session.session_id, url=session.url)

@payment_router.post("/webhook", response_model=WebhookAck)
async def gateway_webhook(
    request: Request,
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    stripe_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db)
):
    payload = await request.body()

    try:
        event = gateway.parse_event(payload, stripe_signature)
    except PaymentGatewayError as e:
        logger.warning(f"Rejected gateway webhook: {e}")
        raise BadRequestException(detail=f"Webhook error: {e}")

    PaymentService(db, gateway).handle_gateway_event(event)
    return WebhookAck()

@payment_router.get("/status/{payment_id}", response_model=PaymentGet)
def get_payment_status(
    permissions: Annotated[Principal, Depends(get_current_principal)],
    payment_id: str,
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    db: Session = Depends(get_db)
):
    return PaymentService(db, gateway).get_payment(payment_id, permissions)

@payment_router.get("/session/{session_id}", response_model=PaymentGet)
def get_payment_status_by_session(
    permissions: Annotated[Principal, Depends(get_current_principal)],
    session_id: str,
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    db: Session = Depends(get_db)
):
    return PaymentService(db, gateway).get_payment_by_transaction(session_id, permissions)

@payment_router.post("/{payment_id}/enroll", response_model=EnrollmentGet, status_code=status.HTTP_201_CREATED)
def enroll_after_payment(
    permissions: Annotated[Principal, Depends(get_current_student)],
    payment_id: str,
    db: Session = Depends(get_db)
):
    return EnrollmentService(db).enroll_after_payment(payment_id, student_id=permissions.user_id)
