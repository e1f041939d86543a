from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, JSON, String
from sqlalchemy.orm import relationship

from .base import Base, new_id, utc_now
from .types import UserRole, enum_values


class User(Base):
    __tablename__ = 'user'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(True), nullable=False, default=utc_now, onupdate=utc_now)
    email = Column(String(320), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    given_name = Column(String(255))
    family_name = Column(String(255))
    role = Column(
        Enum(UserRole, name='user_role', values_callable=enum_values),
        nullable=False,
        default=UserRole.STUDENT
    )
    email_verified = Column(Boolean, nullable=False, default=False)
    email_verification_token = Column(String(255), unique=True)
    email_verification_token_expiry = Column(DateTime(True))

    # Relationships
    courses = relationship("Course", back_populates="instructor", uselist=True, lazy="select")
    enrollments = relationship("Enrollment", back_populates="student", uselist=True, lazy="select")


class AuditLog(Base):
    __tablename__ = 'audit_log'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    user_id = Column(ForeignKey('user.id', ondelete='SET NULL'), index=True)
    action = Column(String(63), nullable=False)
    ip_address = Column(String(64))
    user_agent = Column(String(1024))
    details = Column(JSON)
