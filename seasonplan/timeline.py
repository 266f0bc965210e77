"""
SEASON PLAN - Reference Timeline
================================
Client-side start/end estimate for every task, derived from the
precedence graph and lead times. This is a sanity check next to the
authoritative computedDates, never a replacement for them.

Resolution is an iterative relaxation over display order: each pass
resolves every task whose predecessors are all resolved, until a pass
makes no progress. Cycles and dangling order codes simply leave tasks
out of the result.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from .errors import DependencyUnresolvedError
from .graph import TaskGraph
from .schema import Task, TimelineSpan

logger = logging.getLogger("seasonplan")

EXTRA_PASSES = 5    # Failsafe on top of one pass per task
DISPLAY_FORMAT = "%d-%b-%y"
UNKNOWN_SPAN = "..."


class UnresolvedPolicy(str, Enum):
    """What to do when some tasks get no timeline"""
    IGNORE = "ignore"   # Silently return the partial map
    WARN = "warn"       # Log a warning, return the partial map
    ERROR = "error"     # Raise DependencyUnresolvedError


class ReferenceTimeline(BaseModel):
    """Task id -> reference span, possibly partial"""
    spans: Dict[str, TimelineSpan] = Field(default_factory=dict)
    unresolved: List[str] = Field(default_factory=list)             # Task ids, display order
    dangling: Dict[str, List[str]] = Field(default_factory=dict)    # Task id -> missing codes
    passes: int = 0

    def get(self, task_id: str) -> Optional[TimelineSpan]:
        return self.spans.get(task_id)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.spans

    def __len__(self) -> int:
        return len(self.spans)

    @property
    def is_complete(self) -> bool:
        return not self.unresolved


def calculate_reference_timeline(
    tasks: Union[Iterable[Task], TaskGraph],
    season_created_at: datetime,
    on_unresolved: UnresolvedPolicy = UnresolvedPolicy.WARN
) -> ReferenceTimeline:
    """
    Compute reference start/end dates for every resolvable task.

    start = max(season_created_at, latest predecessor end)
    end   = start + lead_time days

    A predecessor code that names no task is never satisfied, so the task
    and everything downstream of it stay unresolved. Missing entries mean
    "timeline unknown", not zero dates.
    """
    graph = TaskGraph.of(tasks)
    spans: Dict[str, TimelineSpan] = {}

    remaining = len(graph)
    max_passes = len(graph) + EXTRA_PASSES
    passes = 0

    while remaining > 0 and passes < max_passes:
        progress = 0
        for task in graph.ordered:
            if task.id in spans:
                continue

            start = season_created_at
            can_calculate = True
            for code in task.preceding_tasks:
                pred = graph.resolve(code)
                if pred is None or pred.id not in spans:
                    can_calculate = False
                    break
                pred_end = spans[pred.id].end
                if pred_end > start:
                    start = pred_end

            if can_calculate:
                spans[task.id] = TimelineSpan(start=start, end=start + timedelta(days=task.lead_time))
                progress += 1

        remaining -= progress
        passes += 1
        if progress == 0:
            break

    timeline = ReferenceTimeline(spans=spans, passes=passes)
    for task in graph.ordered:
        if task.id in spans:
            continue
        timeline.unresolved.append(task.id)
        missing = graph.dangling(task)
        if missing:
            timeline.dangling[task.id] = missing

    if timeline.unresolved:
        _report_unresolved(graph, timeline, on_unresolved)

    return timeline


def _report_unresolved(
    graph: TaskGraph,
    timeline: ReferenceTimeline,
    on_unresolved: UnresolvedPolicy
) -> None:
    """Apply the unresolved-dependency policy"""
    orders = [graph.get(task_id).order for task_id in timeline.unresolved]
    message = (
        f"Could not resolve reference timeline for {len(orders)} task(s): {', '.join(orders)}. "
        f"Check for circular or missing preceding tasks."
    )
    if timeline.dangling:
        missing = sorted({code for codes in timeline.dangling.values() for code in codes})
        message += f" Missing order codes: {', '.join(missing)}."

    if on_unresolved == UnresolvedPolicy.ERROR:
        raise DependencyUnresolvedError(message, timeline=timeline)
    if on_unresolved == UnresolvedPolicy.WARN:
        logger.warning(f"⚠️ {message}")


def format_span(span: Optional[TimelineSpan]) -> str:
    """Render a span as 'DD-Mon-YY - DD-Mon-YY', or '...' when unknown"""
    if span is None:
        return UNKNOWN_SPAN
    return f"{span.start.strftime(DISPLAY_FORMAT)} - {span.end.strftime(DISPLAY_FORMAT)}"
