"""
SEASON PLAN - Errors
====================
Expected conditions (bad edits, denied edits, unresolved timelines) are
returned as values by the core. These exceptions exist for callers that
want to raise them, and for failures of the season service.
"""

from typing import Any, Optional


class SeasonPlanError(Exception):
    """Base error for the season plan package"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class EditValidationError(SeasonPlanError):
    """Proposed edit is invalid (e.g. completion before start)"""


class AuthorizationError(SeasonPlanError):
    """Actor may not edit the task"""


class DependencyUnresolvedError(SeasonPlanError):
    """Reference timeline could not resolve every task"""

    def __init__(self, message: str, timeline: Any = None):
        super().__init__(message, code="DependencyUnresolved")
        self.timeline = timeline    # Partial ReferenceTimeline


class PersistenceError(SeasonPlanError):
    """Season service call failed"""


class MalformedResponseError(PersistenceError):
    """Season service answered with data that does not validate"""
