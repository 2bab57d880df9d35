"""FastAPI dependencies resolving the per-application stores and services."""

from fastapi import Request

from fittrack.core.config import Settings
from fittrack.services.auth import AuthService
from fittrack.services.csrf_tokens import CsrfTokenStore
from fittrack.services.progress import ProgressService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_csrf_store(request: Request) -> CsrfTokenStore:
    return request.app.state.csrf_store


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_progress_service(request: Request) -> ProgressService:
    return request.app.state.progress_service
