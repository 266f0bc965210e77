"""
SEASON PLAN - Task Graph
========================
Display ordering and order-code lookup for a season's tasks.

Precedence edges are order codes, not object references, so the graph is
an index rebuilt per snapshot rather than a linked structure.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .schema import Task

logger = logging.getLogger("seasonplan")


def order_key(code: str) -> Tuple[int, str]:
    """Spreadsheet column ordering: shorter codes first, so "Z" < "AA"."""
    return (len(code), code)


def sort_by_order(tasks: Iterable[Task]) -> List[Task]:
    """Stable sort of tasks into display order"""
    return sorted(tasks, key=lambda t: order_key(t.order))


class TaskGraph:
    """
    Read-only view over one snapshot of tasks.

    Build a new graph whenever the task collection changes; nothing here
    is cached across snapshots.
    """

    def __init__(self, tasks: Iterable[Task]):
        self.ordered: List[Task] = sort_by_order(tasks)
        self.by_order: Dict[str, Task] = {}
        self.by_id: Dict[str, Task] = {}

        for task in self.ordered:
            if task.order in self.by_order:
                logger.warning(f"⚠️ Duplicate order code {task.order}, keeping first task")
            else:
                self.by_order[task.order] = task
            self.by_id.setdefault(task.id, task)

    @classmethod
    def of(cls, tasks: Union[Iterable[Task], "TaskGraph"]) -> "TaskGraph":
        """Accept either a graph or a plain task collection"""
        if isinstance(tasks, TaskGraph):
            return tasks
        return cls(tasks)

    def __len__(self) -> int:
        return len(self.ordered)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.ordered)

    def __contains__(self, code: object) -> bool:
        """Membership is by order code; use has_id for task ids"""
        return code in self.by_order

    def has_order(self, code: str) -> bool:
        return code in self.by_order

    def has_id(self, task_id: str) -> bool:
        return task_id in self.by_id

    def get(self, task_id: str) -> Optional[Task]:
        return self.by_id.get(task_id)

    def resolve(self, code: str) -> Optional[Task]:
        return self.by_order.get(code)

    def predecessors(self, task: Task) -> List[Task]:
        """Predecessor tasks that exist in this graph"""
        resolved = []
        for code in task.preceding_tasks:
            pred = self.resolve(code)
            if pred is not None:
                resolved.append(pred)
        return resolved

    def dangling(self, task: Task) -> List[str]:
        """Predecessor codes that name no task"""
        return [code for code in task.preceding_tasks if code not in self.by_order]

    def dependents(self, task: Task) -> List[Task]:
        """Tasks that list this task as a predecessor"""
        return [t for t in self.ordered if task.order in t.preceding_tasks]
