"""Request/response models shared by categories and labels."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskquest.clock import UTCDateTime

DEFAULT_COLOR = "#6B7280"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: str = Field(DEFAULT_COLOR, pattern=COLOR_PATTERN)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class TagUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    color: str | None = Field(None, pattern=COLOR_PATTERN)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class TagSummary(BaseModel):
    """Tag as embedded in a task."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    created_at: UTCDateTime
    updated_at: UTCDateTime
