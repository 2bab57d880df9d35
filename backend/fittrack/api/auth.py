"""Authentication API endpoints.

Both routes are exempt from CSRF checks and sit behind the auth rate limit.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from fittrack.api.deps import get_auth_service
from fittrack.schemas.auth import LoginRequest, RegisterRequest, UserResponse
from fittrack.services.auth import AccountExistsError, AuthService, InvalidCredentialsError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Create an account."""
    try:
        user = auth_service.register(
            username=data.username,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
        )
    except AccountExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return UserResponse.model_validate(user)


@router.post("/login", response_model=UserResponse)
async def login(
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Check credentials and return the account."""
    try:
        user = auth_service.authenticate(data.username, data.password)
    except InvalidCredentialsError as e:
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        ) from e

    return UserResponse.model_validate(user)
