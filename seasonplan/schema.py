"""
SEASON PLAN - Schema Definition
===============================
Seasons, their tasks and the people who act on them.

Wire format is camelCase (as returned by the season service); every model
also accepts snake_case names so the core can build them directly.
"""

from enum import Enum
from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class SeasonStatus(str, Enum):
    """Season lifecycle states"""
    OPEN = "Open"           # Tasks may be edited
    ON_HOLD = "On-Hold"     # Paused, read-only
    CLOSED = "Closed"       # Finished, read-only
    CANCELED = "Canceled"   # Abandoned, read-only


class TaskStatus(str, Enum):
    """Persisted task states"""
    PENDING = "pending"
    COMPLETED = "completed"
    BLOCKED = "blocked"     # Set externally, never by this package


class DisplayState(str, Enum):
    """Derived task state for display, never persisted"""
    COMPLETED = "completed"
    BLOCKED = "blocked"
    ACTIONABLE = "actionable"
    PENDING = "pending"


class Role(str, Enum):
    """Closed set of user roles"""
    ADMIN = "admin"
    PLANNER = "planner"
    USER = "user"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Build a Role from user input, ignoring case and surrounding blanks."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Role must be a string, got {type(value).__name__}")
        normalized = value.strip().lower()
        for role in cls:
            if role.value == normalized:
                return role
        raise ValueError(f"Unknown role: {value!r}")

    @property
    def is_privileged(self) -> bool:
        return self in (Role.ADMIN, Role.PLANNER)


class WireModel(BaseModel):
    """Base for models exchanged with the season service"""
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ComputedDates(WireModel):
    """Planned dates supplied by the season service"""
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class TimelineSpan(BaseModel):
    """Reference start/end computed locally from the precedence graph"""
    start: datetime
    end: datetime


class Task(WireModel):
    """Single task of a season plan"""
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    order: str = Field(min_length=1)    # Spreadsheet-style code: A..Z, AA..
    name: str = ""
    responsible: List[str] = Field(default_factory=list)   # Department names

    # Precedence, by order code (may name missing tasks or the task itself)
    preceding_tasks: List[str] = Field(default_factory=list, alias="precedingTasks")
    lead_time: int = Field(default=0, ge=0, alias="leadTime")  # Days

    status: TaskStatus = TaskStatus.PENDING
    computed_dates: ComputedDates = Field(default_factory=ComputedDates, alias="computedDates")
    actual_completion: Optional[datetime] = Field(default=None, alias="actualCompletion")
    remarks: str = ""
    attachments: List[Any] = Field(default_factory=list)   # Opaque

    @field_validator("remarks", mode="before")
    @classmethod
    def _remarks_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("responsible", "preceding_tasks", "attachments", mode="before")
    @classmethod
    def _list_default(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("computed_dates", mode="before")
    @classmethod
    def _dates_default(cls, value: Any) -> Any:
        return {} if value is None else value


class Season(WireModel):
    """Season header"""
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str
    buyer: Optional[Any] = None         # Opaque buyer reference
    status: SeasonStatus = SeasonStatus.OPEN
    created_at: datetime = Field(alias="createdAt")
    description: Optional[str] = None
    require_attention: List[str] = Field(default_factory=list, alias="requireAttention")

    @field_validator("require_attention", mode="before")
    @classmethod
    def _list_default(cls, value: Any) -> Any:
        return [] if value is None else value


class SeasonSnapshot(WireModel):
    """Full season + task state as last confirmed by the season service"""
    season: Season
    tasks: List[Task] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_orders(self) -> "SeasonSnapshot":
        seen = set()
        for task in self.tasks:
            if task.order in seen:
                raise ValueError(f"Duplicate task order code: {task.order}")
            seen.add(task.order)
        return self


class Actor(BaseModel):
    """Person attempting an action"""
    name: str = "anonymous"
    role: Role = Role.USER
    department: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value: Any) -> Role:
        return Role.parse(value)

    @property
    def is_privileged(self) -> bool:
        return self.role.is_privileged
