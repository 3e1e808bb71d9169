"""Request/response models for task endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from taskquest.clock import UTCDateTime
from taskquest.tags.schemas import TagSummary
from taskquest.tasks.priority import Priority, Status


# --- Requests ---


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    due_date: UTCDateTime | None = None
    priority: Priority
    category: str | None = Field(None, max_length=50)
    category_ids: list[int] = Field(default_factory=list, max_length=10)
    label_ids: list[int] = Field(default_factory=list, max_length=20)


class TaskUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    due_date: UTCDateTime | None = None
    priority: Priority | None = None
    category: str | None = Field(None, max_length=50)
    category_ids: list[int] | None = Field(None, max_length=10)
    label_ids: list[int] | None = Field(None, max_length=20)


# --- Responses ---


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    due_date: UTCDateTime | None = None
    status: Status
    priority: Priority
    xp_value: int
    category: str | None = None
    categories: list[TagSummary] = []
    labels: list[TagSummary] = []
    completed_at: UTCDateTime | None = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class UnlockedAchievement(BaseModel):
    slug: str
    name: str
    description: str


class CompletionResponse(BaseModel):
    task: TaskResponse
    xp_awarded: int
    new_total_xp: int
    new_level: int
    leveled_up: bool
    new_achievements: list[UnlockedAchievement] = []
