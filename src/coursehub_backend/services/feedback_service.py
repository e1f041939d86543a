import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from coursehub_backend.errors import AccessDeniedError, DomainError, ErrorCode, ValidationFailedError
from coursehub_backend.interface.feedback import FeedbackCreate, FeedbackUpdate
from coursehub_backend.model.course import Feedback, Submission
from coursehub_backend.model.types import SubmissionStatus
from coursehub_backend.permissions.entitlements import EntitlementEvaluator, require
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.repositories.base import DuplicateError
from coursehub_backend.repositories.course import FeedbackRepository, SubmissionRepository

logger = logging.getLogger(__name__)


def validate_rating(rating: Optional[int]) -> None:
    if rating is not None and not 1 <= rating <= 5:
        raise ValidationFailedError("Rating must be between 1 and 5")


class FeedbackService:

    def __init__(self, db: Session):
        self.submissions = SubmissionRepository(db)
        self.feedback = FeedbackRepository(db)
        self.evaluator = EntitlementEvaluator(db)

    def _load_submission(self, submission_id: str) -> Submission:
        submission = self.submissions.get_by_id_optional(submission_id)
        if submission is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Submission not found")
        return submission

    def create_feedback(self, principal: Principal, data: FeedbackCreate) -> Feedback:
        submission = self._load_submission(data.submission_id)
        course = submission.assignment.course
        require(
            self.evaluator.evaluate_ownership(principal, course),
            "Only the course instructor can give feedback"
        )
        validate_rating(data.rating)

        if self.feedback.find_one_by(submission_id=submission.id, instructor_id=principal.user_id) is not None:
            raise DomainError(ErrorCode.FEEDBACK_EXISTS)

        try:
            feedback = self.feedback.create(Feedback(
                submission_id=submission.id,
                instructor_id=principal.user_id,
                comment=data.comment,
                rating=data.rating
            ))
        except DuplicateError:
            raise DomainError(ErrorCode.FEEDBACK_EXISTS)

        self.submissions.update(submission, {"status": SubmissionStatus.REVIEWED})
        logger.info(f"Feedback {feedback.id} given on submission {submission.id}")
        return feedback

    def check_submission_visibility(self, principal: Principal, submission: Submission, feedback: Optional[Feedback] = None) -> None:
        """
        Who may read feedback on ``submission``:

        admins; the course owner or the feedback author; the submitting
        student while the course entitlement still allows them.
        """
        if principal.is_admin:
            return

        course = submission.assignment.course

        if principal.is_instructor:
            if principal.owns(course):
                return
            if feedback is not None and feedback.instructor_id == principal.user_id:
                return
            raise AccessDeniedError(ErrorCode.FORBIDDEN, "Access denied to this feedback")

        if principal.is_student and submission.student_id == principal.user_id:
            require(self.evaluator.evaluate_course_access(principal, course))
            return

        raise AccessDeniedError(ErrorCode.FORBIDDEN, "Access denied to this feedback")

    def get_feedback(self, principal: Principal, feedback_id: str) -> Feedback:
        feedback = self.feedback.get_by_id_optional(feedback_id)
        if feedback is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Feedback not found")
        self.check_submission_visibility(principal, feedback.submission, feedback)
        return feedback

    def list_submission_feedback(self, principal: Principal, submission_id: str) -> List[Feedback]:
        submission = self._load_submission(submission_id)
        self.check_submission_visibility(principal, submission)
        return self.feedback.list_for_submission(submission.id)

    def update_feedback(self, principal: Principal, feedback_id: str, data: FeedbackUpdate) -> Feedback:
        feedback = self.feedback.get_by_id_optional(feedback_id)
        if feedback is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Feedback not found")
        if not (principal.is_admin or feedback.instructor_id == principal.user_id):
            raise AccessDeniedError(ErrorCode.FORBIDDEN, "Only the feedback author can update it")

        updates = data.model_dump(exclude_unset=True)
        validate_rating(updates.get("rating"))
        return self.feedback.update(feedback, updates)
