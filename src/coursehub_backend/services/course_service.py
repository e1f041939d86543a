import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from coursehub_backend.errors import AccessDeniedError, ErrorCode
from coursehub_backend.interface.courses import CourseCreate, CourseUpdate
from coursehub_backend.model.course import Course
from coursehub_backend.permissions.entitlements import EntitlementEvaluator, require
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.repositories.course import CourseRepository

logger = logging.getLogger(__name__)


class CourseService:

    def __init__(self, db: Session):
        self.courses = CourseRepository(db)
        self.evaluator = EntitlementEvaluator(db)

    def _owned_course(self, principal: Principal, course_id: str) -> Course:
        course = self.courses.get_by_id_optional(course_id)
        require(self.evaluator.evaluate_ownership(principal, course), "You do not own this course")
        return course

    def create_course(self, principal: Principal, data: CourseCreate) -> Course:
        require(self.evaluator.evaluate_course_creation(principal), "Only instructors can create courses")

        course = self.courses.create(Course(
            instructor_id=principal.user_id,
            is_published=False,
            **data.model_dump()
        ))
        logger.info(f"Course {course.id} created by {principal.user_id}")
        return course

    def list_published(self, skip: int = 0, limit: int = 100) -> List[Course]:
        return self.courses.list_published(limit=limit, offset=skip)

    def list_own(self, principal: Principal) -> List[Course]:
        if not (principal.is_instructor or principal.is_admin):
            raise AccessDeniedError(ErrorCode.FORBIDDEN, "Only instructors have courses")
        return self.courses.list_by_instructor(principal.user_id)

    def get_course(self, principal: Optional[Principal], course_id: str) -> Course:
        """Course details: published courses for everyone, drafts for the owner and admins."""
        course = self.courses.get_by_id_optional(course_id)
        if course is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Course not found")
        if course.is_published:
            return course
        if principal is not None and (principal.is_admin or principal.owns(course)):
            return course
        raise AccessDeniedError(ErrorCode.NOT_FOUND, "Course not found")

    def get_course_content(self, principal: Principal, course_id: str) -> Course:
        """Course with learning content, gated by the entitlement rules."""
        course = self.courses.get_by_id_optional(course_id)
        require(self.evaluator.evaluate_course_access(principal, course))
        return course

    def update_course(self, principal: Principal, course_id: str, data: CourseUpdate) -> Course:
        course = self._owned_course(principal, course_id)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("currency"):
            updates["currency"] = updates["currency"].upper()
        return self.courses.update(course, updates)

    def set_published(self, principal: Principal, course_id: str, published: bool) -> Course:
        course = self._owned_course(principal, course_id)
        course = self.courses.update(course, {"is_published": published})
        logger.info(f"Course {course.id} {'published' if published else 'unpublished'} by {principal.user_id}")
        return course

    def delete_course(self, principal: Principal, course_id: str) -> None:
        course = self._owned_course(principal, course_id)
        self.courses.delete(course)
        logger.info(f"Course {course_id} deleted by {principal.user_id}")
