# FitTrack Services
from fittrack.services.auth import AuthService
from fittrack.services.csrf_tokens import CsrfTokenStore, TokenStatus
from fittrack.services.periodic_sweep import PeriodicSweep
from fittrack.services.progress import ProgressService

__all__ = [
    "AuthService",
    "CsrfTokenStore",
    "PeriodicSweep",
    "ProgressService",
    "TokenStatus",
]
