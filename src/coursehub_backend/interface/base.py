from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class ListQuery(BaseModel):
    skip: Optional[int] = 0
    limit: Optional[int] = 100

class BaseEntityGet(BaseModel):
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Update timestamp")

def reject_null(value):
    """Partial updates may omit a required column but never set it to null."""
    if value is None:
        raise ValueError("Field cannot be null")
    return value
