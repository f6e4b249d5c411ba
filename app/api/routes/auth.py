from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import get_token_service, TokenService
from ...api.deps import get_current_user
from ...services.auth_service import AuthService
from ...schemas.auth import (
    UserLogin, UserSignup, UserResponse, UserWithProfileResponse,
    AuthData, SignupData
)
from ...schemas.common import ApiResponse, DataResponse
from ...models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])

def get_auth_service(
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
) -> AuthService:
    return AuthService(db, token_service)

@router.post(
    "/signup",
    response_model=ApiResponse[SignupData],
    status_code=status.HTTP_201_CREATED
)
async def signup(
    signup_data: UserSignup,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Register a new patient or doctor and return a session token."""
    user, token = auth_service.signup(signup_data)

    return ApiResponse[SignupData](
        message="User registered successfully",
        data=SignupData(user=UserResponse.model_validate(user), token=token)
    )

@router.post("/login", response_model=ApiResponse[AuthData])
async def login(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Authenticate user and return a session token."""
    user, token = auth_service.login(login_data)

    return ApiResponse[AuthData](
        message="Login successful",
        data=AuthData(user=UserWithProfileResponse.model_validate(user), token=token)
    )

@router.get("/me", response_model=DataResponse[UserWithProfileResponse])
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return DataResponse[UserWithProfileResponse](
        data=UserWithProfileResponse.model_validate(current_user)
    )
