"""
Enrollment and payment repositories.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.course import Enrollment
from ..model.payment import Payment
from ..model.types import PaymentStatus


class EnrollmentRepository(BaseRepository[Enrollment]):
    """Repository for Enrollment rows, unique per (student, course)."""

    unique_keys = ("student_id", "course_id")

    def __init__(self, db: Session):
        super().__init__(db, Enrollment)

    def find_for(self, student_id: str, course_id: str) -> Optional[Enrollment]:
        return self.find_one_by(student_id=student_id, course_id=course_id)

    def list_for_student(self, student_id: str) -> List[Enrollment]:
        return self.find_by(student_id=student_id)


class PaymentRepository(BaseRepository[Payment]):

    unique_keys = ("transaction_id",)

    def __init__(self, db: Session):
        super().__init__(db, Payment)

    def find_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        return self.find_one_by(transaction_id=transaction_id)

    def has_completed_payment(self, student_id: str, course_id: str) -> bool:
        return self.exists_by(
            student_id=student_id,
            course_id=course_id,
            status=PaymentStatus.COMPLETED
        )
