from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from coursehub_backend.interface.base import BaseEntityGet, reject_null

class CourseCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    duration: Optional[str] = None
    curriculum: Optional[str] = None
    pricing: float = Field(0, ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()

class CourseGet(BaseEntityGet):
    id: str
    instructor_id: str
    title: str
    description: str
    duration: Optional[str] = None
    curriculum: Optional[str] = None
    pricing: float
    currency: str
    is_published: bool

    model_config = ConfigDict(from_attributes=True)

class CourseList(BaseModel):
    id: str
    instructor_id: str
    title: str
    pricing: float
    currency: str
    is_published: bool

    model_config = ConfigDict(from_attributes=True)

class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    duration: Optional[str] = None
    curriculum: Optional[str] = None
    pricing: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)

    @field_validator('title', 'description', 'pricing', 'currency')
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)
