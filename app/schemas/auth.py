from datetime import date, datetime
from typing import Optional
from pydantic import Field

from .common import CamelModel
from .doctor import DoctorProfileSummary
from ..core.security import UserRole

class UserSignup(CamelModel):
    # Presence is checked by the signup handler so it can report its own messages
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    user_type: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None

class UserLogin(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

class UserResponse(CamelModel):
    """Public projection of an account. Never carries the password hash."""
    id: int = Field(alias="_id")
    email: str
    name: str
    role: UserRole = Field(alias="userType")
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    profile_image: Optional[str] = None
    is_active: bool
    is_email_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UserWithProfileResponse(UserResponse):
    doctor_profile: Optional[DoctorProfileSummary] = None

class AuthData(CamelModel):
    user: UserWithProfileResponse
    token: str

class SignupData(CamelModel):
    user: UserResponse
    token: str
