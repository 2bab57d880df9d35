"""FitTrack Configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "FitTrack"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: Literal["development", "production"] = "development"

    # Comma-separated lists
    cors_origins: str = "http://localhost:5000"
    trusted_proxy_ips: str = ""

    # CSRF protection
    csrf_token_ttl_seconds: int = 24 * 60 * 60
    csrf_cleanup_interval_seconds: int = 60 * 60
    csrf_one_time_use: bool = False
    csrf_exempt_paths: str = "/api/auth/login,/api/auth/register,/api/auth/oauth"

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max_requests: int = 100
    auth_rate_limit_max_requests: int = 5
    rate_limit_max_keys: int = 10000
    rate_limit_cleanup_interval_seconds: int = 60 * 60

    # None means "on in production"
    enforce_https: bool | None = None
    enable_metrics: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(sorted(VALID_LOG_LEVELS))}, got {v!r}"
            )
        return level

    @field_validator(
        "csrf_token_ttl_seconds",
        "csrf_cleanup_interval_seconds",
        "rate_limit_window_seconds",
        "rate_limit_max_requests",
        "auth_rate_limit_max_requests",
        "rate_limit_max_keys",
        "rate_limit_cleanup_interval_seconds",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def https_enforced(self) -> bool:
        if self.enforce_https is None:
            return self.is_production
        return self.enforce_https

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.cors_origins)

    @property
    def trusted_proxy_ip_set(self) -> set[str]:
        return set(_split_csv(self.trusted_proxy_ips))

    @property
    def csrf_exempt_path_list(self) -> list[str]:
        return [p.rstrip("/") for p in _split_csv(self.csrf_exempt_paths)]

    def check_security_configuration(self) -> list[str]:
        """Return human-readable warnings about risky settings.

        Nothing here blocks startup; callers log the warnings.
        """
        warnings: list[str] = []

        if self.is_production and not self.https_enforced:
            warnings.append(
                "HTTPS enforcement is disabled in production; the CSRF cookie "
                "is still marked Secure and will not be sent over plain HTTP"
            )
        if "*" in self.cors_origins_list:
            warnings.append(
                "CORS_ORIGINS contains '*' while credentials are allowed; "
                "restrict it to the frontend origin"
            )
        if not self.rate_limit_enabled:
            warnings.append("Rate limiting is disabled; login endpoints are unthrottled")
        if self.is_production and self.debug:
            warnings.append("DEBUG is enabled in production (API docs are exposed)")
        if self.auth_rate_limit_max_requests > self.rate_limit_max_requests:
            warnings.append(
                "AUTH_RATE_LIMIT_MAX_REQUESTS is higher than RATE_LIMIT_MAX_REQUESTS; "
                "the auth policy is never the binding limit"
            )

        return warnings


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
