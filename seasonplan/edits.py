"""
SEASON PLAN - Edit Transitions
==============================
Turns a proposed task edit into the smallest patch the season service
needs, or a rejection. Nothing here performs I/O or mutates a task.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import AuthorizationError, EditValidationError, SeasonPlanError
from .policy import DenyReason
from .schema import Task, TaskStatus

INVALID_COMPLETION_DATE = "InvalidCompletionDate"
TASK_MISMATCH = "TaskMismatch"


class TaskPatch(BaseModel):
    """Changed task fields; unset fields are not part of the patch"""
    model_config = ConfigDict(populate_by_name=True)

    remarks: Optional[str] = None
    actual_completion: Optional[datetime] = Field(default=None, alias="actualCompletion")
    status: Optional[TaskStatus] = None

    @property
    def changed_fields(self) -> set:
        return set(self.model_fields_set)

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set

    def to_payload(self) -> Dict[str, Any]:
        """Wire payload with only the changed keys"""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def apply_to(self, task: Task) -> Task:
        """Preview of the task with this patch applied"""
        update = {name: getattr(self, name) for name in self.model_fields_set}
        return task.model_copy(update=update)


class NoChange(BaseModel):
    """Edit changed nothing; carries the unchanged task"""
    task: Task


class Rejection(BaseModel):
    """Edit refused before reaching the season service"""
    code: str
    message: str

    def to_error(self) -> SeasonPlanError:
        if self.code in {reason.value for reason in DenyReason}:
            return AuthorizationError(self.message, code=self.code)
        return EditValidationError(self.message, code=self.code)


EditResult = Union[TaskPatch, NoChange, Rejection]


def apply_edit(old_task: Task, proposed_task: Task) -> EditResult:
    """
    Diff remarks and actualCompletion between the committed and proposed
    task.

    - completion earlier (by day) than computedDates.start is rejected
    - setting a completion on a non-completed task adds status=completed
    - clearing a completion never moves the task out of completed
    - an empty diff is a NoChange, not an error
    """
    if old_task.id != proposed_task.id:
        return Rejection(
            code=TASK_MISMATCH,
            message=f"Proposed edit is for task {proposed_task.id}, not {old_task.id}."
        )

    changes: Dict[str, Any] = {}

    if proposed_task.remarks != old_task.remarks:
        changes["remarks"] = proposed_task.remarks

    new_completion = proposed_task.actual_completion
    if new_completion != old_task.actual_completion:
        planned_start = old_task.computed_dates.start
        if new_completion is not None and planned_start is not None:
            if new_completion.date() < planned_start.date():
                return Rejection(
                    code=INVALID_COMPLETION_DATE,
                    message="Actual completion date cannot be earlier than the start date."
                )
        changes["actual_completion"] = new_completion

    if not changes:
        return NoChange(task=old_task)

    if changes.get("actual_completion") is not None and old_task.status != TaskStatus.COMPLETED:
        changes["status"] = TaskStatus.COMPLETED

    return TaskPatch(**changes)


def schedule_variance_days(task: Task) -> Optional[int]:
    """Days between actual completion and planned end; positive means late"""
    planned_end = task.computed_dates.end
    if task.actual_completion is None or planned_end is None:
        return None
    return (task.actual_completion.date() - planned_end.date()).days


def format_variance(days: Optional[int]) -> str:
    if days is None:
        return ""
    return f"+{days}d" if days > 0 else f"{days}d"
