"""Pydantic schemas for the CSRF token endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class CsrfTokenResponse(BaseModel):
    """Token echoed in the body so a client without the cookie can bootstrap."""

    model_config = ConfigDict(populate_by_name=True)

    csrf_token: str = Field(alias="csrfToken")
