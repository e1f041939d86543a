from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, String

from sqlalchemy.orm import relationship

from .base import Base, new_id, utc_now
from .types import PaymentStatus, enum_values


class Payment(Base):
    __tablename__ = 'payment'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(True), nullable=False, default=utc_now, onupdate=utc_now)
    student_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    course_id = Column(ForeignKey('course.id', ondelete='CASCADE'), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(
        Enum(PaymentStatus, name='payment_status', values_callable=enum_values),
        nullable=False,
        default=PaymentStatus.PENDING
    )
    payment_provider = Column(String(63), nullable=False, default="stripe")
    transaction_id = Column(String(255), unique=True)

    course = relationship("Course")
