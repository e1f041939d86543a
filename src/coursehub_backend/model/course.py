from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Enum, Float,
    ForeignKey, Integer, JSON, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship

from .base import Base, new_id, utc_now
from .types import EnrollmentStatus, SubmissionStatus, SubmissionType, enum_values


class Course(Base):
    __tablename__ = 'course'
    __table_args__ = (
        CheckConstraint('pricing >= 0', name='ck_course_pricing_non_negative'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(True), nullable=False, default=utc_now, onupdate=utc_now)
    instructor_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(String(255))
    curriculum = Column(Text)
    pricing = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    is_published = Column(Boolean, nullable=False, default=False)

    # Relationships
    instructor = relationship("User", back_populates="courses")
    lessons = relationship("Lesson", back_populates="course", cascade="all, delete-orphan", order_by="Lesson.order")
    assignments = relationship("Assignment", back_populates="course", cascade="all, delete-orphan")
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")

    @property
    def is_paid(self) -> bool:
        return (self.pricing or 0) > 0


class Lesson(Base):
    __tablename__ = 'lesson'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(True), nullable=False, default=utc_now, onupdate=utc_now)
    course_id = Column(ForeignKey('course.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    content = Column(Text)
    video_url = Column(String(2048))
    file_urls = Column(JSON, nullable=False, default=list)
    order = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)

    course = relationship("Course", back_populates="lessons")
    completions = relationship("LessonCompletion", back_populates="lesson", cascade="all, delete-orphan")


class LessonCompletion(Base):
    __tablename__ = 'lesson_completion'
    __table_args__ = (
        UniqueConstraint('student_id', 'lesson_id', name='lesson_completion_student_lesson_key'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    student_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    lesson_id = Column(ForeignKey('lesson.id', ondelete='CASCADE'), nullable=False, index=True)
    completed_at = Column(DateTime(True), nullable=False, default=utc_now)

    lesson = relationship("Lesson", back_populates="completions")


class Enrollment(Base):
    __tablename__ = 'enrollment'
    __table_args__ = (
        UniqueConstraint('student_id', 'course_id', name='enrollment_student_course_key'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    student_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    course_id = Column(ForeignKey('course.id', ondelete='CASCADE'), nullable=False, index=True)
    status = Column(
        Enum(EnrollmentStatus, name='enrollment_status', values_callable=enum_values),
        nullable=False,
        default=EnrollmentStatus.ACTIVE
    )
    enrolled_at = Column(DateTime(True), nullable=False, default=utc_now)
    progress_percentage = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(True))

    student = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")


class Assignment(Base):
    __tablename__ = 'assignment'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(True), nullable=False, default=utc_now, onupdate=utc_now)
    course_id = Column(ForeignKey('course.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    submission_type = Column(
        Enum(SubmissionType, name='submission_type', values_callable=enum_values),
        nullable=False
    )
    deadline = Column(DateTime(True))

    course = relationship("Course", back_populates="assignments")
    submissions = relationship("Submission", back_populates="assignment", cascade="all, delete-orphan")


class Submission(Base):
    __tablename__ = 'submission'
    __table_args__ = (
        UniqueConstraint('assignment_id', 'student_id', name='submission_assignment_student_key'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    assignment_id = Column(ForeignKey('assignment.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    submission_type = Column(
        Enum(SubmissionType, name='submission_type', values_callable=enum_values),
        nullable=False
    )
    file_url = Column(String(2048))
    link_url = Column(String(2048))
    submitted_at = Column(DateTime(True), nullable=False, default=utc_now)
    status = Column(
        Enum(SubmissionStatus, name='submission_status', values_callable=enum_values),
        nullable=False,
        default=SubmissionStatus.SUBMITTED
    )

    assignment = relationship("Assignment", back_populates="submissions")
    feedback = relationship("Feedback", back_populates="submission", cascade="all, delete-orphan")


class Feedback(Base):
    __tablename__ = 'feedback'
    __table_args__ = (
        UniqueConstraint('submission_id', 'instructor_id', name='feedback_submission_instructor_key'),
        CheckConstraint('rating IS NULL OR (rating >= 1 AND rating <= 5)', name='ck_feedback_rating_range'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(True), nullable=False, default=utc_now, onupdate=utc_now)
    submission_id = Column(ForeignKey('submission.id', ondelete='CASCADE'), nullable=False, index=True)
    instructor_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    comment = Column(Text, nullable=False)
    rating = Column(Integer)

    submission = relationship("Submission", back_populates="feedback")
