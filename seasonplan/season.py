"""
SEASON PLAN - Season Status
===========================
Tracks the confirmed season status and the status currently selected
for change. Any of the four states may move to any other; the only
cross-cutting rule is that task edits need an Open season.
"""

import logging
from typing import Union

from pydantic import BaseModel

from .edits import Rejection
from .schema import Actor, Season, SeasonStatus

logger = logging.getLogger("seasonplan")

STATUS_UNCHANGED = "StatusUnchanged"
NOT_PRIVILEGED = "NotPrivileged"


class StatusTransition(BaseModel):
    """Accepted request to move a season to a new status"""
    season_id: str
    from_status: SeasonStatus
    to_status: SeasonStatus


class SeasonStatusController:
    """Confirmed vs. selected season status"""

    def __init__(self, season: Season):
        self.season = season
        self.selected: SeasonStatus = season.status

    @property
    def confirmed(self) -> SeasonStatus:
        return self.season.status

    @property
    def allows_task_edits(self) -> bool:
        return self.confirmed == SeasonStatus.OPEN

    def select(self, status: Union[SeasonStatus, str]) -> SeasonStatus:
        self.selected = SeasonStatus(status)
        return self.selected

    def request_transition(
        self,
        actor: Actor,
        status: Union[SeasonStatus, str, None] = None
    ) -> Union[StatusTransition, Rejection]:
        """Validate a status change; defaults to the selected status"""
        if not actor.is_privileged:
            return Rejection(
                code=NOT_PRIVILEGED,
                message="Only Admin or Planner roles can change the season status."
            )

        target = self.select(status) if status is not None else self.selected
        if target == self.confirmed:
            return Rejection(
                code=STATUS_UNCHANGED,
                message=f"Season is already {target.value}."
            )

        return StatusTransition(
            season_id=self.season.id,
            from_status=self.confirmed,
            to_status=target
        )

    def confirm(self, season: Season) -> None:
        """Adopt the season returned by the season service"""
        self.season = season
        self.selected = season.status

    def revert(self) -> None:
        """Drop the pending selection after a failed change"""
        if self.selected != self.confirmed:
            logger.info(f"↩️ Reverting status selection {self.selected.value} -> {self.confirmed.value}")
        self.selected = self.confirmed
