"""
Course content repositories.

Lookups used by the entitlement evaluator live here as well, so every
storage access on the read path goes through the repository error handling.
"""

from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .base import BaseRepository, RepositoryError
from ..model.course import (
    Assignment, Course, Feedback, Lesson, LessonCompletion, Submission
)


class CourseRepository(BaseRepository[Course]):
    """Repository for Course entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, Course)

    def list_published(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Course]:
        return self.list(limit=limit, offset=offset, is_published=True)

    def list_by_instructor(self, instructor_id: str) -> List[Course]:
        return self.find_by(instructor_id=instructor_id)


class LessonRepository(BaseRepository[Lesson]):

    def __init__(self, db: Session):
        super().__init__(db, Lesson)

    def list_for_course(self, course_id: str, published_only: bool = False) -> List[Lesson]:
        try:
            query = self.db.query(Lesson).filter(Lesson.course_id == course_id)
            if published_only:
                query = query.filter(Lesson.is_published.is_(True))
            return query.order_by(Lesson.order).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list lessons: {str(e)}") from e


class LessonCompletionRepository(BaseRepository[LessonCompletion]):

    unique_keys = ("student_id", "lesson_id")

    def __init__(self, db: Session):
        super().__init__(db, LessonCompletion)

    def count_published_completed(self, student_id: str, course_id: str) -> int:
        """Completed lessons of a course that are still published."""
        try:
            return (
                self.db.query(LessonCompletion)
                .join(Lesson, Lesson.id == LessonCompletion.lesson_id)
                .filter(
                    LessonCompletion.student_id == student_id,
                    Lesson.course_id == course_id,
                    Lesson.is_published.is_(True)
                )
                .count()
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to count lesson completions: {str(e)}") from e


class AssignmentRepository(BaseRepository[Assignment]):

    def __init__(self, db: Session):
        super().__init__(db, Assignment)

    def list_for_course(self, course_id: str) -> List[Assignment]:
        return self.find_by(course_id=course_id)


class SubmissionRepository(BaseRepository[Submission]):

    unique_keys = ("assignment_id", "student_id")

    def __init__(self, db: Session):
        super().__init__(db, Submission)

    def find_for_student(self, assignment_id: str, student_id: str) -> Optional[Submission]:
        return self.find_one_by(assignment_id=assignment_id, student_id=student_id)


class FeedbackRepository(BaseRepository[Feedback]):

    unique_keys = ("submission_id", "instructor_id")

    def __init__(self, db: Session):
        super().__init__(db, Feedback)

    def list_for_submission(self, submission_id: str) -> List[Feedback]:
        return self.find_by(submission_id=submission_id)
