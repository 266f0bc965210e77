"""
SEASON PLAN - Authorization Policy
==================================
Decides whether an actor may edit a task. The same decision drives the
edit affordances and the defensive check before an edit is submitted.

Guards run in a fixed order and the first failing one wins:

    1. season must be Open
    2. completed tasks are locked unless admin/planner
    3. blocked tasks are locked for everyone
    4. pending tasks must be actionable
    5. non admin/planner actors must belong to a responsible department
"""

from enum import Enum
from typing import Iterable, Optional, Union

from pydantic import BaseModel

from .actionability import is_actionable
from .errors import AuthorizationError
from .graph import TaskGraph
from .schema import Actor, Season, SeasonStatus, Task, TaskStatus

EDITABLE_FIELDS = ("actualCompletion", "remarks")


class DenyReason(str, Enum):
    """Why an edit was denied"""
    SEASON_NOT_OPEN = "SeasonNotOpen"
    COMPLETED_LOCKED = "CompletedLocked"
    BLOCKED = "Blocked"
    PREDECESSORS_INCOMPLETE = "PredecessorsIncomplete"
    NOT_RESPONSIBLE_DEPARTMENT = "NotResponsibleDepartment"
    FIELD_NOT_EDITABLE = "FieldNotEditable"


DENY_MESSAGES = {
    DenyReason.SEASON_NOT_OPEN: "Tasks can only be edited while the season is Open.",
    DenyReason.COMPLETED_LOCKED: "Completed tasks can only be modified by Admin or Planner roles.",
    DenyReason.BLOCKED: "Blocked tasks cannot be edited.",
    DenyReason.PREDECESSORS_INCOMPLETE: "This task is not yet actionable as preceding tasks are not complete.",
    DenyReason.NOT_RESPONSIBLE_DEPARTMENT: "Your department is not allowed to edit this task.",
    DenyReason.FIELD_NOT_EDITABLE: "Only actual completion and remarks can be edited.",
}


class EditDecision(BaseModel):
    """Outcome of an authorization check"""
    allowed: bool
    reason: Optional[DenyReason] = None
    message: str = ""

    @classmethod
    def allow(cls) -> "EditDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "EditDecision":
        return cls(allowed=False, reason=reason, message=DENY_MESSAGES[reason])

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise AuthorizationError(self.message, code=self.reason.value)


def is_responsible(actor: Actor, task: Task) -> bool:
    """Department membership, compared case-insensitively"""
    if not actor.department:
        return False
    department = actor.department.strip().lower()
    return any(d.strip().lower() == department for d in task.responsible)


def can_edit(
    actor: Actor,
    task: Task,
    season: Season,
    all_tasks: Union[Iterable[Task], TaskGraph]
) -> EditDecision:
    """Decide whether actor may edit task's editable fields"""
    if season.status != SeasonStatus.OPEN:
        return EditDecision.deny(DenyReason.SEASON_NOT_OPEN)

    if task.status == TaskStatus.COMPLETED and not actor.is_privileged:
        return EditDecision.deny(DenyReason.COMPLETED_LOCKED)

    if task.status == TaskStatus.BLOCKED:
        return EditDecision.deny(DenyReason.BLOCKED)

    if task.status == TaskStatus.PENDING and not is_actionable(task, all_tasks):
        return EditDecision.deny(DenyReason.PREDECESSORS_INCOMPLETE)

    if not actor.is_privileged and not is_responsible(actor, task):
        return EditDecision.deny(DenyReason.NOT_RESPONSIBLE_DEPARTMENT)

    return EditDecision.allow()


def can_edit_field(
    actor: Actor,
    task: Task,
    season: Season,
    all_tasks: Union[Iterable[Task], TaskGraph],
    field: str
) -> EditDecision:
    """Per-field check; every editable field shares the task decision"""
    if field not in EDITABLE_FIELDS:
        return EditDecision.deny(DenyReason.FIELD_NOT_EDITABLE)
    return can_edit(actor, task, season, all_tasks)
