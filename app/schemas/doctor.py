from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .common import CamelModel
from ..models.doctor import DayOfWeek

class AvailabilitySlot(CamelModel):
    day: Optional[DayOfWeek] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

class DoctorOwner(CamelModel):
    """Public fields of the account that owns a doctor profile."""
    id: int = Field(alias="_id")
    name: str
    email: str
    phone: Optional[str] = None
    profile_image: Optional[str] = None

class DoctorProfileSummary(CamelModel):
    id: int = Field(alias="_id")
    specialization: str
    license_number: str
    qualification: List[str] = []
    experience: int
    consultation_fee: float
    available_slots: List[AvailabilitySlot] = []
    rating: float = 0
    total_reviews: int = 0
    bio: Optional[str] = None
    services: List[str] = []
    is_verified: bool = False

class DoctorResponse(DoctorProfileSummary):
    user: Optional[DoctorOwner] = Field(None, alias="userId")
    verification_documents: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class DoctorProfileUpdate(CamelModel):
    """Self-service profile changes; only fields sent in the body are applied."""
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    qualification: Optional[List[str]] = None
    experience: Optional[int] = None
    consultation_fee: Optional[float] = None
    available_slots: Optional[List[AvailabilitySlot]] = None
    bio: Optional[str] = None
    services: Optional[List[str]] = None

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class DoctorList(BaseModel):
    doctors: List[DoctorResponse]
    pagination: Pagination
