from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tasktrack.models.task import TaskPriority, TaskStatus

TITLE_MIN, TITLE_MAX = 3, 100
DESCRIPTION_MAX = 500


def _clean_title(v: str) -> str:
    v = v.strip()
    if not TITLE_MIN <= len(v) <= TITLE_MAX:
        raise ValueError(f"Title must be between {TITLE_MIN} and {TITLE_MAX} characters")
    return v


def _clean_description(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if len(v) > DESCRIPTION_MAX:
        raise ValueError(f"Description cannot exceed {DESCRIPTION_MAX} characters")
    return v or None


def _clean_tags(v: List[str]) -> List[str]:
    """Trim, drop blanks and collapse duplicates, keeping first-seen order."""
    seen = {}
    for tag in v:
        tag = tag.strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def as_utc(v: Optional[datetime]) -> Optional[datetime]:
    """Normalize to UTC. Naive values (SQLite drops the offset) are taken as UTC."""
    if v is None:
        return None
    if v.tzinfo is None:
        return v.replace(tzinfo=UTC)
    return v.astimezone(UTC)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


class TaskCreate(CamelModel):
    title: str
    description: Optional[str] = None
    status: TaskStatus = Field(TaskStatus.PENDING, validate_default=True)
    priority: TaskPriority = Field(TaskPriority.MEDIUM, validate_default=True)
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_length(cls, v):
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def description_length(cls, v):
        return _clean_description(v)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v):
        return as_utc(v)

    @field_validator("tags")
    @classmethod
    def tag_set(cls, v):
        return _clean_tags(v)


class TaskUpdate(CamelModel):
    """Partial update. Only keys present in the request body are applied.

    ``description`` and ``dueDate`` may be sent as null to clear them; the
    other fields must carry a value when present.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None

    @field_validator("title", "status", "priority", "tags", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("title")
    @classmethod
    def title_length(cls, v):
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def description_length(cls, v):
        return _clean_description(v)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v):
        return as_utc(v)

    @field_validator("tags")
    @classmethod
    def tag_set(cls, v):
        return _clean_tags(v)

    def patch(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class TaskOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    owner: str
    created_at: datetime
    updated_at: datetime

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def utc(cls, v):
        return as_utc(v)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class TaskPage(BaseModel):
    items: List[TaskOut]
    pagination: Pagination
