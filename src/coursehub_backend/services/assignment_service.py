from typing import List
from sqlalchemy.orm import Session

from coursehub_backend.errors import AccessDeniedError, ErrorCode
from coursehub_backend.interface.assignments import AssignmentCreate, AssignmentUpdate
from coursehub_backend.model.course import Assignment
from coursehub_backend.permissions.entitlements import EntitlementEvaluator, require
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.repositories.course import AssignmentRepository, CourseRepository


class AssignmentService:

    def __init__(self, db: Session):
        self.courses = CourseRepository(db)
        self.assignments = AssignmentRepository(db)
        self.evaluator = EntitlementEvaluator(db)

    def _load(self, assignment_id: str) -> Assignment:
        assignment = self.assignments.get_by_id_optional(assignment_id)
        if assignment is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Assignment not found")
        return assignment

    def create_assignment(self, principal: Principal, data: AssignmentCreate) -> Assignment:
        course = self.courses.get_by_id_optional(data.course_id)
        require(self.evaluator.evaluate_ownership(principal, course), "You can only add assignments to your own courses")
        return self.assignments.create(Assignment(**data.model_dump()))

    def get_assignment(self, principal: Principal, assignment_id: str) -> Assignment:
        assignment = self._load(assignment_id)
        require(self.evaluator.evaluate_course_access(principal, assignment.course))
        return assignment

    def list_course_assignments(self, principal: Principal, course_id: str) -> List[Assignment]:
        course = self.courses.get_by_id_optional(course_id)
        require(self.evaluator.evaluate_course_access(principal, course))
        return self.assignments.list_for_course(course.id)

    def update_assignment(self, principal: Principal, assignment_id: str, data: AssignmentUpdate) -> Assignment:
        assignment = self._load(assignment_id)
        require(self.evaluator.evaluate_ownership(principal, assignment.course), "You do not own this course")
        return self.assignments.update(assignment, data.model_dump(exclude_unset=True))

    def delete_assignment(self, principal: Principal, assignment_id: str) -> None:
        assignment = self._load(assignment_id)
        require(self.evaluator.evaluate_ownership(principal, assignment.course), "You do not own this course")
        self.assignments.delete(assignment)
