from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from coursehub_backend.interface.users import UserGet

class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    given_name: str = Field(min_length=1, max_length=255)
    family_name: str = Field(min_length=1, max_length=255)

class SignupResponse(BaseModel):
    user: UserGet
    message: str = "Account created. Please check your email to verify your account."

class VerifyEmailRequest(BaseModel):
    token: str

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    token: str
    user: UserGet

class AdminLoginResponse(BaseModel):
    token: str
    session_id: str
    admin_level: str
    expires_at: datetime
    user: UserGet

class AdminSessionStatus(BaseModel):
    session_id: str
    user_id: str
    expires_at: datetime
    remaining_seconds: int
    expiring_soon: bool

class AdminSessionGet(BaseModel):
    session_id: str
    user_id: str
    created_at: datetime
    last_activity: datetime

    model_config = ConfigDict(from_attributes=True)

class ForcedLogoutResponse(BaseModel):
    session_id: str
    terminated: bool
    message: Optional[str] = None
