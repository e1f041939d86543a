import logging
from typing import List
from sqlalchemy.orm import Session

from coursehub_backend.errors import AccessDeniedError, DomainError, ErrorCode, ValidationFailedError
from coursehub_backend.interface.submissions import SubmissionCreate
from coursehub_backend.model.base import as_utc, utc_now
from coursehub_backend.model.course import Submission
from coursehub_backend.model.types import SubmissionStatus, SubmissionType
from coursehub_backend.permissions.entitlements import EntitlementEvaluator, require
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.repositories.base import DuplicateError
from coursehub_backend.repositories.course import AssignmentRepository, SubmissionRepository

logger = logging.getLogger(__name__)


class SubmissionService:

    def __init__(self, db: Session):
        self.assignments = AssignmentRepository(db)
        self.submissions = SubmissionRepository(db)
        self.evaluator = EntitlementEvaluator(db)

    def submit(self, principal: Principal, data: SubmissionCreate) -> Submission:
        if not principal.is_student:
            raise AccessDeniedError(ErrorCode.FORBIDDEN, "Only students can submit assignments")

        assignment = self.assignments.get_by_id_optional(data.assignment_id)
        if assignment is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Assignment not found")
        require(self.evaluator.evaluate_course_access(principal, assignment.course))

        if data.submission_type != assignment.submission_type:
            raise ValidationFailedError(f"This assignment expects a {assignment.submission_type.value} submission")
        if data.submission_type == SubmissionType.FILE and not data.file_url:
            raise ValidationFailedError("file_url is required for file submissions")
        if data.submission_type == SubmissionType.LINK and not data.link_url:
            raise ValidationFailedError("link_url is required for link submissions")

        if self.submissions.find_for_student(assignment.id, principal.user_id) is not None:
            raise DomainError(ErrorCode.ALREADY_SUBMITTED)

        now = utc_now()
        late = assignment.deadline is not None and now > as_utc(assignment.deadline)

        try:
            submission = self.submissions.create(Submission(
                assignment_id=assignment.id,
                student_id=principal.user_id,
                submission_type=data.submission_type,
                file_url=data.file_url if data.submission_type == SubmissionType.FILE else None,
                link_url=data.link_url if data.submission_type == SubmissionType.LINK else None,
                submitted_at=now,
                status=SubmissionStatus.LATE if late else SubmissionStatus.SUBMITTED
            ))
        except DuplicateError:
            raise DomainError(ErrorCode.ALREADY_SUBMITTED)

        logger.info(f"Submission {submission.id} for assignment {assignment.id} ({submission.status.value})")
        return submission

    def can_view(self, principal: Principal, submission: Submission) -> bool:
        if principal.is_admin or submission.student_id == principal.user_id:
            return True
        return principal.owns(submission.assignment.course)

    def get_submission(self, principal: Principal, submission_id: str) -> Submission:
        submission = self.submissions.get_by_id_optional(submission_id)
        if submission is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Submission not found")
        if not self.can_view(principal, submission):
            raise AccessDeniedError(ErrorCode.FORBIDDEN, "Access denied to this submission")
        return submission

    def list_assignment_submissions(self, principal: Principal, assignment_id: str) -> List[Submission]:
        assignment = self.assignments.get_by_id_optional(assignment_id)
        if assignment is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Assignment not found")
        require(self.evaluator.evaluate_ownership(principal, assignment.course), "Only the course instructor can list submissions")
        return self.submissions.find_by(assignment_id=assignment.id)
