import logging
import math
from typing import List, Tuple
from sqlalchemy.orm import Session

from coursehub_backend.errors import AccessDeniedError, ErrorCode
from coursehub_backend.interface.lessons import LessonCreate, LessonUpdate
from coursehub_backend.model.base import utc_now
from coursehub_backend.model.course import Enrollment, Lesson, LessonCompletion
from coursehub_backend.model.types import EnrollmentStatus
from coursehub_backend.permissions.entitlements import EntitlementEvaluator, require
from coursehub_backend.permissions.principal import Principal
from coursehub_backend.repositories.base import DuplicateError
from coursehub_backend.repositories.course import (
    CourseRepository, LessonCompletionRepository, LessonRepository
)
from coursehub_backend.repositories.enrollment import EnrollmentRepository

logger = logging.getLogger(__name__)


def progress_percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return min(100, math.floor(completed * 100 / total + 0.5))


class LessonService:

    def __init__(self, db: Session):
        self.courses = CourseRepository(db)
        self.lessons = LessonRepository(db)
        self.completions = LessonCompletionRepository(db)
        self.enrollments = EnrollmentRepository(db)
        self.evaluator = EntitlementEvaluator(db)

    def _owned_lesson(self, principal: Principal, lesson_id: str) -> Lesson:
        lesson = self.lessons.get_by_id_optional(lesson_id)
        if lesson is None:
            raise AccessDeniedError(ErrorCode.NOT_FOUND, "Lesson not found")
        require(self.evaluator.evaluate_ownership(principal, lesson.course), "You do not own this course")
        return lesson

    def create_lesson(self, principal: Principal, data: LessonCreate) -> Lesson:
        course = self.courses.get_by_id_optional(data.course_id)
        require(self.evaluator.evaluate_ownership(principal, course), "You can only add lessons to your own courses")

        lesson = self.lessons.create(Lesson(is_published=False, **data.model_dump()))
        logger.info(f"Lesson {lesson.id} created in course {course.id}")
        return lesson

    def get_lesson(self, principal: Principal, lesson_id: str) -> Lesson:
        lesson = self.lessons.get_by_id_optional(lesson_id)
        require(self.evaluator.evaluate_lesson_access(principal, lesson))
        return lesson

    def list_course_lessons(self, principal: Principal, course_id: str) -> List[Lesson]:
        course = self.courses.get_by_id_optional(course_id)
        entitlement = self.evaluator.evaluate_course_access(principal, course)
        require(entitlement)
        drafts_visible = principal.is_admin or principal.owns(course)
        return self.lessons.list_for_course(course.id, published_only=not drafts_visible)

    def update_lesson(self, principal: Principal, lesson_id: str, data: LessonUpdate) -> Lesson:
        lesson = self._owned_lesson(principal, lesson_id)
        return self.lessons.update(lesson, data.model_dump(exclude_unset=True))

    def delete_lesson(self, principal: Principal, lesson_id: str) -> None:
        lesson = self._owned_lesson(principal, lesson_id)
        self.lessons.delete(lesson)

    def complete_lesson(self, principal: Principal, lesson_id: str) -> Tuple[LessonCompletion, Enrollment]:
        """Mark a lesson completed for a student; repeated calls keep the first completion."""
        lesson = self.lessons.get_by_id_optional(lesson_id)
        require(self.evaluator.evaluate_lesson_access(principal, lesson))

        if not principal.is_student:
            raise AccessDeniedError(ErrorCode.FORBIDDEN, "Only students can complete lessons")

        completion = self.completions.find_one_by(student_id=principal.user_id, lesson_id=lesson.id)
        if completion is None:
            try:
                completion = self.completions.create(LessonCompletion(
                    student_id=principal.user_id,
                    lesson_id=lesson.id
                ))
            except DuplicateError:
                completion = self.completions.find_one_by(student_id=principal.user_id, lesson_id=lesson.id)
                if completion is None:
                    raise

        enrollment = self.update_progress(principal.user_id, lesson.course_id)
        return completion, enrollment

    def update_progress(self, student_id: str, course_id: str) -> Enrollment:
        enrollment = self.enrollments.find_for(student_id, course_id)
        if enrollment is None:
            raise AccessDeniedError(ErrorCode.NOT_ENROLLED)

        total = len(self.lessons.list_for_course(course_id, published_only=True))
        completed = self.completions.count_published_completed(student_id, course_id)
        percentage = progress_percentage(completed, total)

        updates = {"progress_percentage": percentage}
        if percentage >= 100 and enrollment.status != EnrollmentStatus.COMPLETED:
            updates["status"] = EnrollmentStatus.COMPLETED
            updates["completed_at"] = utc_now()
            logger.info(f"Student {student_id} completed course {course_id}")

        return self.enrollments.update(enrollment, updates)
