"""
SEASON PLAN - Seasonal Work Plan Engine
=======================================

Task dependency timeline and permission engine for seasonal work plans.

Usage:
    from seasonplan import SeasonSession, FileSeasonStore, Actor

    session = SeasonSession(FileSeasonStore(".seasons"), season_id="ss24")

    for task in session.ordered_tasks:
        print(task.order, session.display_state(task), session.reference_timeline.get(task.id))

    planner = Actor(name="kim", role="Planner")
    outcome = session.propose_edit(planner, "A", actual_completion=datetime(2024, 1, 6))
    print(outcome.kind, outcome.message)
"""

from .schema import (
    Actor,
    ComputedDates,
    DisplayState,
    Role,
    Season,
    SeasonSnapshot,
    SeasonStatus,
    Task,
    TaskStatus,
    TimelineSpan
)
from .errors import (
    AuthorizationError,
    DependencyUnresolvedError,
    EditValidationError,
    MalformedResponseError,
    PersistenceError,
    SeasonPlanError
)
from .graph import TaskGraph, order_key, sort_by_order
from .timeline import ReferenceTimeline, UnresolvedPolicy, calculate_reference_timeline, format_span
from .actionability import actionable_tasks, blocking_predecessors, display_state, is_actionable
from .policy import EDITABLE_FIELDS, DenyReason, EditDecision, can_edit, can_edit_field
from .edits import NoChange, Rejection, TaskPatch, apply_edit, format_variance, schedule_variance_days
from .season import SeasonStatusController, StatusTransition
from .store import FileSeasonStore, SeasonStore
from .manager import EditOutcome, OutcomeKind, SeasonSession

__version__ = "1.0.0"
__all__ = [
    "Actor",
    "ComputedDates",
    "DisplayState",
    "Role",
    "Season",
    "SeasonSnapshot",
    "SeasonStatus",
    "Task",
    "TaskStatus",
    "TimelineSpan",
    "AuthorizationError",
    "DependencyUnresolvedError",
    "EditValidationError",
    "MalformedResponseError",
    "PersistenceError",
    "SeasonPlanError",
    "TaskGraph",
    "order_key",
    "sort_by_order",
    "ReferenceTimeline",
    "UnresolvedPolicy",
    "calculate_reference_timeline",
    "format_span",
    "actionable_tasks",
    "blocking_predecessors",
    "display_state",
    "is_actionable",
    "EDITABLE_FIELDS",
    "DenyReason",
    "EditDecision",
    "can_edit",
    "can_edit_field",
    "NoChange",
    "Rejection",
    "TaskPatch",
    "apply_edit",
    "schedule_variance_days",
    "format_variance",
    "SeasonStatusController",
    "StatusTransition",
    "FileSeasonStore",
    "SeasonStore",
    "EditOutcome",
    "OutcomeKind",
    "SeasonSession"
]
