"""
SEASON PLAN - Actionability
===========================
Whether a task can be worked on right now. Always derived from the
current snapshot; never stored on the task.
"""

from typing import Iterable, List, Union

from .graph import TaskGraph
from .schema import DisplayState, Task, TaskStatus

TaskCollection = Union[Iterable[Task], TaskGraph]


def is_actionable(task: Task, all_tasks: TaskCollection) -> bool:
    """
    A pending task is actionable when every predecessor is completed.

    Completed and blocked tasks never are. A predecessor code that does
    not resolve to a task keeps the task non-actionable.
    """
    if task.status in (TaskStatus.COMPLETED, TaskStatus.BLOCKED):
        return False
    if not task.preceding_tasks:
        return True

    graph = TaskGraph.of(all_tasks)
    for code in task.preceding_tasks:
        pred = graph.resolve(code)
        if pred is None or pred.status != TaskStatus.COMPLETED:
            return False
    return True


def blocking_predecessors(task: Task, all_tasks: TaskCollection) -> List[str]:
    """Order codes keeping a task from being actionable"""
    graph = TaskGraph.of(all_tasks)
    blocking = []
    for code in task.preceding_tasks:
        pred = graph.resolve(code)
        if pred is None or pred.status != TaskStatus.COMPLETED:
            blocking.append(code)
    return blocking


def display_state(task: Task, all_tasks: TaskCollection) -> DisplayState:
    if task.status == TaskStatus.COMPLETED:
        return DisplayState.COMPLETED
    if task.status == TaskStatus.BLOCKED:
        return DisplayState.BLOCKED
    if is_actionable(task, all_tasks):
        return DisplayState.ACTIONABLE
    return DisplayState.PENDING


def actionable_tasks(all_tasks: TaskCollection) -> List[Task]:
    """Actionable tasks in display order"""
    graph = TaskGraph.of(all_tasks)
    return [task for task in graph.ordered if is_actionable(task, graph)]
