# FitTrack Pydantic Schemas
from fittrack.schemas.auth import LoginRequest, RegisterRequest, UserResponse
from fittrack.schemas.csrf import CsrfTokenResponse
from fittrack.schemas.progress import ProgressMetricsCreate, ProgressMetricsResponse

__all__ = [
    "CsrfTokenResponse",
    "LoginRequest",
    "ProgressMetricsCreate",
    "ProgressMetricsResponse",
    "RegisterRequest",
    "UserResponse",
]
