"""
SEASON PLAN - Season Session
============================
Owns the snapshot of one season for the lifetime of a working session.

The snapshot is only ever replaced wholesale by what the season service
returns; nothing is mutated locally before the service confirms it.
One mutation may be in flight at a time.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union
import logging

from pydantic import BaseModel, ValidationError

from .actionability import display_state, is_actionable
from .edits import NoChange, Rejection, TaskPatch, apply_edit, format_variance, schedule_variance_days
from .errors import DependencyUnresolvedError, MalformedResponseError, PersistenceError
from .graph import TaskGraph
from .policy import DenyReason, EditDecision, can_edit
from .schema import Actor, DisplayState, Season, SeasonSnapshot, SeasonStatus, Task, TaskStatus
from .season import NOT_PRIVILEGED, STATUS_UNCHANGED, SeasonStatusController
from .store import SeasonStore
from .timeline import ReferenceTimeline, UnresolvedPolicy, calculate_reference_timeline, format_span

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("seasonplan")

MUTATION_IN_FLIGHT = "MutationInFlight"
TASK_NOT_FOUND = "TaskNotFound"

EDITABLE_CHANGES = {
    "remarks": "remarks",
    "actual_completion": "actual_completion",
    "actualCompletion": "actual_completion",
}
DETAIL_FIELDS = {
    "name": "name",
    "buyer": "buyer",
    "description": "description",
    "require_attention": "requireAttention",
    "requireAttention": "requireAttention",
}


class OutcomeKind(str, Enum):
    """Result of a proposed mutation"""
    APPLIED = "applied"       # Season service confirmed, snapshot replaced
    UNCHANGED = "unchanged"   # Nothing to send
    REJECTED = "rejected"     # Refused locally, nothing sent
    FAILED = "failed"         # Season service call failed, snapshot kept


class EditOutcome(BaseModel):
    """Tagged result of propose_edit / change_status / update_details"""
    kind: OutcomeKind
    code: Optional[str] = None
    message: str = ""
    task: Optional[Task] = None
    season: Optional[Season] = None
    patch: Optional[TaskPatch] = None
    warning: Optional[str] = None     # Set when the new snapshot has unresolved dependencies

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.APPLIED, OutcomeKind.UNCHANGED)

    @classmethod
    def rejected(cls, code: str, message: str, **kwargs: Any) -> "EditOutcome":
        return cls(kind=OutcomeKind.REJECTED, code=code, message=message, **kwargs)

    @classmethod
    def failed(cls, error: PersistenceError, **kwargs: Any) -> "EditOutcome":
        return cls(kind=OutcomeKind.FAILED, code=error.code or "PersistenceFailed", message=error.message, **kwargs)


def _unresolved_fields(error: Optional[DependencyUnresolvedError]) -> Dict[str, Any]:
    """Outcome fields flagging a confirmed change whose timeline is partial"""
    if error is None:
        return {}
    return {"code": error.code, "warning": error.message}


class SeasonSession:
    """
    Working session over one season

    Exposes the display-ordered tasks, the reference timeline and the
    permission checks, and routes every change through the season store.
    """

    def __init__(
        self,
        store: SeasonStore,
        season_id: Optional[str] = None,
        on_unresolved: UnresolvedPolicy = UnresolvedPolicy.WARN
    ):
        self.store = store
        self.on_unresolved = UnresolvedPolicy(on_unresolved)
        self._snapshot: Optional[SeasonSnapshot] = None
        self._graph: Optional[TaskGraph] = None
        self._timeline: Optional[ReferenceTimeline] = None
        self._status: Optional[SeasonStatusController] = None
        self._busy = False

        if season_id:
            self.load(season_id)

    # ========================================
    # SNAPSHOT
    # ========================================

    def load(self, season_id: Optional[str] = None) -> SeasonSnapshot:
        """Fetch a full snapshot; the previous one is kept on failure"""
        season_id = season_id or (self._snapshot.season.id if self._snapshot else None)
        if not season_id:
            raise ValueError("No season id given")

        try:
            data = self.store.fetch_season(season_id)
        except PersistenceError as e:
            logger.error(f"❌ Failed to fetch season {season_id}: {e.message}")
            raise

        snapshot = self._parse_snapshot(data)
        unresolved = self._adopt(snapshot)
        if unresolved is not None:
            raise unresolved

        logger.info(f"📂 Loaded season: {snapshot.season.name} ({len(snapshot.tasks)} tasks)")
        return snapshot

    def _parse_snapshot(self, data: Any) -> SeasonSnapshot:
        try:
            return SeasonSnapshot.model_validate({"season": data["season"], "tasks": data["tasks"]})
        except (KeyError, TypeError, ValidationError) as e:
            logger.error(f"❌ Invalid response from season service: {e}")
            raise MalformedResponseError(
                "Received an invalid response from the server.", code="MalformedResponse"
            ) from e

    def _adopt(self, snapshot: SeasonSnapshot) -> Optional[DependencyUnresolvedError]:
        """
        Replace snapshot, graph and timeline together.

        Under the error policy the unresolved-dependency error is returned,
        not raised: the snapshot is adopted either way.
        """
        graph = TaskGraph(snapshot.tasks)
        unresolved_error = None
        try:
            timeline = calculate_reference_timeline(graph, snapshot.season.created_at, self.on_unresolved)
        except DependencyUnresolvedError as e:
            timeline = e.timeline
            unresolved_error = e

        self._snapshot = snapshot
        self._graph = graph
        self._timeline = timeline
        if self._status is None or self._status.season.id != snapshot.season.id:
            self._status = SeasonStatusController(snapshot.season)
        else:
            self._status.confirm(snapshot.season)

        return unresolved_error

    def _require_loaded(self) -> SeasonSnapshot:
        if not self._snapshot:
            raise ValueError("No season loaded")
        return self._snapshot

    @property
    def snapshot(self) -> SeasonSnapshot:
        return self._require_loaded()

    @property
    def season(self) -> Season:
        return self._require_loaded().season

    @property
    def graph(self) -> TaskGraph:
        self._require_loaded()
        return self._graph

    @property
    def ordered_tasks(self) -> List[Task]:
        return list(self.graph.ordered)

    @property
    def reference_timeline(self) -> ReferenceTimeline:
        self._require_loaded()
        return self._timeline

    @property
    def status_controller(self) -> SeasonStatusController:
        self._require_loaded()
        return self._status

    @property
    def busy(self) -> bool:
        return self._busy

    def get_task(self, key: str) -> Optional[Task]:
        """Task by id or order code"""
        return self.graph.get(key) or self.graph.resolve(key)

    # ========================================
    # DECISIONS
    # ========================================

    def is_actionable(self, task: Task) -> bool:
        return is_actionable(task, self.graph)

    def display_state(self, task: Task) -> DisplayState:
        return display_state(task, self.graph)

    def can_edit(self, actor: Actor, task: Task) -> EditDecision:
        return can_edit(actor, task, self.season, self.graph)

    def apply_edit(self, old_task: Task, proposed_task: Task) -> Union[TaskPatch, NoChange, Rejection]:
        return apply_edit(old_task, proposed_task)

    # ========================================
    # MUTATIONS
    # ========================================

    def propose_edit(self, actor: Actor, task_id: str, **changes: Any) -> EditOutcome:
        """Edit remarks and/or actual_completion of one task"""
        self._require_loaded()
        old_task = self.get_task(task_id)
        if old_task is None:
            return EditOutcome.rejected(TASK_NOT_FOUND, f"Task not found: {task_id}")

        unknown = [name for name in changes if name not in EDITABLE_CHANGES]
        if unknown:
            return EditOutcome.rejected(
                DenyReason.FIELD_NOT_EDITABLE.value,
                f"Fields not editable: {', '.join(sorted(unknown))}"
            )

        update = {EDITABLE_CHANGES[name]: value for name, value in changes.items()}
        try:
            proposed = Task.model_validate({**old_task.model_dump(), **update})
        except ValidationError as e:
            return EditOutcome.rejected("InvalidValue", f"Invalid edit for task {old_task.order}: {e}")
        return self.propose_task(actor, proposed)

    def propose_task(self, actor: Actor, proposed_task: Task) -> EditOutcome:
        """Authorize, validate and submit an edited copy of a task"""
        snapshot = self._require_loaded()
        if self._busy:
            return EditOutcome.rejected(MUTATION_IN_FLIGHT, "Another update is still in progress.")

        old_task = self.graph.get(proposed_task.id)
        if old_task is None:
            return EditOutcome.rejected(TASK_NOT_FOUND, f"Task not found: {proposed_task.id}")

        decision = self.can_edit(actor, old_task)
        if not decision.allowed:
            logger.warning(f"⛔ {actor.name} cannot edit task {old_task.order}: {decision.reason.value}")
            return EditOutcome.rejected(decision.reason.value, decision.message, task=old_task)

        result = apply_edit(old_task, proposed_task)
        if isinstance(result, Rejection):
            logger.warning(f"⛔ Edit of task {old_task.order} rejected: {result.code}")
            return EditOutcome.rejected(result.code, result.message, task=old_task)
        if isinstance(result, NoChange):
            return EditOutcome(kind=OutcomeKind.UNCHANGED, task=result.task)

        self._busy = True
        try:
            response = self.store.update_task(snapshot.season.id, old_task.id, result.to_payload())
            new_snapshot = self._parse_snapshot(response)
        except PersistenceError as e:
            logger.error(f"❌ Failed to update task {old_task.order}: {e.message}")
            return EditOutcome.failed(e, task=old_task, patch=result)
        finally:
            self._busy = False

        unresolved = self._adopt(new_snapshot)
        updated = self.graph.get(old_task.id) or result.apply_to(old_task)
        message = response.get("message") or "Task updated successfully!"
        logger.info(f"✅ Updated task {updated.order}: {sorted(result.changed_fields)}")

        return EditOutcome(
            kind=OutcomeKind.APPLIED,
            message=message,
            task=updated,
            season=new_snapshot.season,
            patch=result,
            **_unresolved_fields(unresolved)
        )

    def change_status(self, actor: Actor, status: Union[SeasonStatus, str]) -> EditOutcome:
        """Move the season to another status"""
        snapshot = self._require_loaded()
        if self._busy:
            return EditOutcome.rejected(MUTATION_IN_FLIGHT, "Another update is still in progress.")

        try:
            status = SeasonStatus(status)
        except ValueError:
            return EditOutcome.rejected("InvalidStatus", f"Unknown season status: {status}")

        controller = self._status
        result = controller.request_transition(actor, status)
        if isinstance(result, Rejection):
            controller.revert()
            if result.code == STATUS_UNCHANGED:
                return EditOutcome(kind=OutcomeKind.UNCHANGED, message=result.message, season=snapshot.season)
            return EditOutcome.rejected(result.code, result.message)

        self._busy = True
        try:
            data = self.store.update_season_status(snapshot.season.id, result.to_status.value)
            season = self._parse_season(data)
        except PersistenceError as e:
            logger.error(f"❌ Failed to update season status: {e.message}")
            controller.revert()
            return EditOutcome.failed(e)
        finally:
            self._busy = False

        unresolved = self._adopt(SeasonSnapshot(season=season, tasks=snapshot.tasks))
        logger.info(f"🔁 Season {season.name}: {result.from_status.value} -> {season.status.value}")
        return EditOutcome(
            kind=OutcomeKind.APPLIED,
            message="Season status updated successfully!",
            season=season,
            **_unresolved_fields(unresolved)
        )

    def update_details(self, actor: Actor, **changes: Any) -> EditOutcome:
        """Edit season header fields (name, buyer, description, require_attention)"""
        snapshot = self._require_loaded()
        if self._busy:
            return EditOutcome.rejected(MUTATION_IN_FLIGHT, "Another update is still in progress.")
        if not actor.is_privileged:
            return EditOutcome.rejected(NOT_PRIVILEGED, "Only Admin or Planner roles can edit season details.")

        unknown = [name for name in changes if name not in DETAIL_FIELDS]
        if unknown:
            return EditOutcome.rejected("FieldNotEditable", f"Season fields not editable: {', '.join(sorted(unknown))}")

        current = snapshot.season.to_wire()
        patch = {DETAIL_FIELDS[name]: value for name, value in changes.items()}
        patch = {key: value for key, value in patch.items() if current.get(key) != value}
        if not patch:
            return EditOutcome(kind=OutcomeKind.UNCHANGED, season=snapshot.season)

        self._busy = True
        try:
            data = self.store.update_season_details(snapshot.season.id, patch)
            season = self._parse_season(data)
        except PersistenceError as e:
            logger.error(f"❌ Failed to update season details: {e.message}")
            return EditOutcome.failed(e)
        finally:
            self._busy = False

        unresolved = self._adopt(SeasonSnapshot(season=season, tasks=snapshot.tasks))
        logger.info(f"✏️ Updated season details: {sorted(patch)}")
        return EditOutcome(
            kind=OutcomeKind.APPLIED,
            message="Season details updated successfully!",
            season=season,
            **_unresolved_fields(unresolved)
        )

    def _parse_season(self, data: Any) -> Season:
        try:
            return Season.model_validate(data)
        except (TypeError, ValidationError) as e:
            logger.error(f"❌ Invalid season from season service: {e}")
            raise MalformedResponseError(
                "Received an invalid response from the server.", code="MalformedResponse"
            ) from e

    # ========================================
    # REPORTING
    # ========================================

    @property
    def progress_pct(self) -> int:
        tasks = self.graph.ordered
        if not tasks:
            return 0
        completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
        return int((completed / len(tasks)) * 100)

    @property
    def status_summary(self) -> Dict[str, int]:
        summary = {state.value: 0 for state in DisplayState}
        for task in self.graph.ordered:
            summary[self.display_state(task).value] += 1
        return summary

    @property
    def attention_departments(self) -> List[str]:
        return list(self.season.require_attention)

    def get_status_report(self) -> str:
        """Generate human-readable status report"""
        if not self._snapshot:
            return "No season loaded"

        season = self.season
        pct = self.progress_pct

        lines = [
            f"📋 {season.name} [{season.status.value}]",
            f"Progress: {'█' * (pct // 10)}{'░' * (10 - pct // 10)} {pct}%",
        ]
        if season.require_attention:
            lines.append(f"Requires attention: {', '.join(season.require_attention)}")
        lines.extend(["", "Tasks:"])

        status_icons = {
            DisplayState.PENDING: "⬜",
            DisplayState.ACTIONABLE: "🔵",
            DisplayState.BLOCKED: "🟡",
            DisplayState.COMPLETED: "✅",
        }

        for task in self.graph.ordered:
            icon = status_icons[self.display_state(task)]
            span = format_span(self._timeline.get(task.id))
            variance = format_variance(schedule_variance_days(task))
            deps = f" (after: {', '.join(task.preceding_tasks)})" if task.preceding_tasks else ""
            variance_info = f" [{variance}]" if variance else ""
            lines.append(f"  {icon} [{task.order}] {task.name} | {span}{variance_info}{deps}")

        return "\n".join(lines)
