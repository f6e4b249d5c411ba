from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from ...core.database import get_db
from ...api.deps import get_doctor_user
from ...services.doctor_service import DoctorService
from ...schemas.common import ApiResponse, DataResponse
from ...schemas.doctor import DoctorList, DoctorProfileUpdate, DoctorResponse
from ...models.user import User

router = APIRouter(prefix="/doctors", tags=["Doctors"])

def get_doctor_service(db: Session = Depends(get_db)) -> DoctorService:
    return DoctorService(db)

@router.get("", response_model=DataResponse[DoctorList])
async def list_doctors(
    specialization: Optional[str] = Query(None, description="Case-insensitive match"),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    is_verified: Optional[str] = Query(None, alias="isVerified"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Doctors per page"),
    doctor_service: DoctorService = Depends(get_doctor_service)
):
    """List doctors with optional filters, best rated first."""
    doctors, pagination = doctor_service.list_doctors(
        page=page,
        limit=limit,
        specialization=specialization,
        min_rating=min_rating,
        verified_only=is_verified == "true",
    )

    return DataResponse[DoctorList](
        data=DoctorList(
            doctors=[DoctorResponse.model_validate(doctor) for doctor in doctors],
            pagination=pagination
        )
    )

@router.get("/profile", response_model=DataResponse[DoctorResponse])
async def get_own_profile(
    current_user: User = Depends(get_doctor_user),
    doctor_service: DoctorService = Depends(get_doctor_service)
):
    """Get the authenticated doctor's profile."""
    doctor = doctor_service.get_profile_for_user(current_user)
    return DataResponse[DoctorResponse](data=DoctorResponse.model_validate(doctor))

@router.put("/profile", response_model=ApiResponse[DoctorResponse])
async def update_own_profile(
    profile_data: DoctorProfileUpdate,
    current_user: User = Depends(get_doctor_user),
    doctor_service: DoctorService = Depends(get_doctor_service)
):
    """Update the authenticated doctor's profile. Omitted fields are kept."""
    doctor = doctor_service.update_profile_for_user(current_user, profile_data)
    return ApiResponse[DoctorResponse](
        message="Doctor profile updated successfully",
        data=DoctorResponse.model_validate(doctor)
    )

@router.get("/{doctor_id}", response_model=DataResponse[DoctorResponse])
async def get_doctor(
    doctor_id: int,
    doctor_service: DoctorService = Depends(get_doctor_service)
):
    """Get a single doctor by id."""
    doctor = doctor_service.get_doctor(doctor_id)
    return DataResponse[DoctorResponse](data=DoctorResponse.model_validate(doctor))
