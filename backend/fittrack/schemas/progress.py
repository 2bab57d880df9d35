"""Pydantic schemas for progress metrics."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProgressMetricsCreate(BaseModel):
    """Body measurements logged by a user."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: int = Field(..., gt=0)
    weight: int | None = Field(default=None, ge=0)
    body_fat: int | None = Field(default=None, ge=0, le=100)
    chest_measurement: int | None = Field(default=None, ge=0)
    waist_measurement: int | None = Field(default=None, ge=0)
    hips_measurement: int | None = Field(default=None, ge=0)
    arms_measurement: int | None = Field(default=None, ge=0)
    thighs_measurement: int | None = Field(default=None, ge=0)


class ProgressMetricsResponse(ProgressMetricsCreate):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    date: datetime
