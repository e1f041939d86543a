from typing import Optional
from pydantic import BaseModel, ConfigDict
from coursehub_backend.interface.base import BaseEntityGet
from coursehub_backend.model.types import UserRole

class UserGet(BaseEntityGet):
    id: str
    email: str
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    role: UserRole
    email_verified: bool

    model_config = ConfigDict(from_attributes=True)

class UserRoleUpdate(BaseModel):
    role: UserRole
