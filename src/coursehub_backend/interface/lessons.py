from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from coursehub_backend.interface.base import BaseEntityGet, reject_null

class LessonCreate(BaseModel):
    course_id: str
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    file_urls: List[str] = Field(default_factory=list)
    order: int = 0

class LessonGet(BaseEntityGet):
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    file_urls: List[str] = Field(default_factory=list)
    order: int
    is_published: bool

    model_config = ConfigDict(from_attributes=True)

class LessonList(BaseModel):
    id: str
    course_id: str
    title: str
    order: int
    is_published: bool

    model_config = ConfigDict(from_attributes=True)

class LessonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    file_urls: Optional[List[str]] = None
    order: Optional[int] = None
    is_published: Optional[bool] = None

    @field_validator('title', 'file_urls', 'order', 'is_published')
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)

class LessonCompletionGet(BaseModel):
    lesson_id: str
    completed_at: datetime
    progress_percentage: int
