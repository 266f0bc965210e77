"""
SEASON PLAN - Season Store
==========================
The season service the core talks to, and a file-based implementation.

Every mutating call returns the full authoritative state, which callers
treat as the new snapshot instead of merging partial updates.

File layout: {data_dir}/{season_id}.json
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Protocol, Union

from pydantic import ValidationError

from .errors import PersistenceError
from .schema import Season, SeasonSnapshot, SeasonStatus, Task

logger = logging.getLogger("seasonplan")

TASK_PATCH_FIELDS = {"remarks", "actualCompletion", "status"}
SEASON_DETAIL_FIELDS = {"name", "buyer", "description", "requireAttention"}


class SeasonStore(Protocol):
    """Season service contract (wire dictionaries, camelCase)"""

    def fetch_season(self, season_id: str) -> Dict[str, Any]:
        """-> {"season": {...}, "tasks": [...]}"""
        ...

    def update_season_status(self, season_id: str, status: str) -> Dict[str, Any]:
        """-> season"""
        ...

    def update_season_details(self, season_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """-> season"""
        ...

    def update_task(self, season_id: str, task_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """-> {"season": {...}, "tasks": [...], "message": str}"""
        ...


class FileSeasonStore:
    """
    JSON file season store

    One file per season holding the season header and its tasks.
    """

    def __init__(self, data_dir: Union[str, Path] = ".seasons"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    # ========================================
    # FILE OPERATIONS
    # ========================================

    def _get_season_file(self, season_id: str) -> Path:
        return self.data_dir / f"{season_id}.json"

    def _load(self, season_id: str) -> SeasonSnapshot:
        file_path = self._get_season_file(season_id)
        if not file_path.exists():
            raise PersistenceError(f"Season not found: {season_id}", code="NotFound")

        try:
            with open(file_path, 'r') as f:
                data = json.load(f)
            return SeasonSnapshot.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise PersistenceError(f"Corrupt season file {file_path}: {e}", code="Corrupt") from e

    def _save(self, snapshot: SeasonSnapshot) -> None:
        data = snapshot.to_wire()
        data["updatedAt"] = datetime.now(timezone.utc).isoformat()

        file_path = self._get_season_file(snapshot.season.id)
        with open(file_path, 'w') as f:
            json.dump(data, f, indent=2, default=str)

        logger.debug(f"💾 Saved season: {snapshot.season.id} ({len(snapshot.tasks)} tasks)")

    def import_snapshot(self, data: Union[SeasonSnapshot, Dict[str, Any]]) -> SeasonSnapshot:
        """Store a season + tasks document, replacing any existing copy"""
        try:
            snapshot = SeasonSnapshot.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(f"Invalid season document: {e}", code="Invalid") from e

        self._save(snapshot)
        logger.info(f"📥 Imported season: {snapshot.season.name} ({snapshot.season.id})")
        return snapshot

    def list_seasons(self) -> List[Dict[str, Any]]:
        """Stored seasons, most recently updated first"""
        seasons = []

        for file_path in self.data_dir.glob("*.json"):
            try:
                with open(file_path, 'r') as f:
                    data = json.load(f)
                season = data["season"]
                tasks = data.get("tasks", [])
                completed = sum(1 for t in tasks if t.get("status") == "completed")
                seasons.append({
                    "id": season.get("_id") or season.get("id"),
                    "name": season.get("name"),
                    "status": season.get("status"),
                    "tasks": len(tasks),
                    "completed": completed,
                    "updated_at": data.get("updatedAt", "")
                })
            except (OSError, ValueError, KeyError) as e:
                logger.warning(f"Error reading {file_path}: {e}")

        return sorted(seasons, key=lambda x: x["updated_at"], reverse=True)

    # ========================================
    # SEASON SERVICE CONTRACT
    # ========================================

    def fetch_season(self, season_id: str) -> Dict[str, Any]:
        snapshot = self._load(season_id)
        return {"season": snapshot.season.to_wire(), "tasks": [t.to_wire() for t in snapshot.tasks]}

    def update_season_status(self, season_id: str, status: str) -> Dict[str, Any]:
        snapshot = self._load(season_id)
        try:
            snapshot.season.status = SeasonStatus(status)
        except ValueError as e:
            raise PersistenceError(f"Invalid season status: {status}", code="Invalid") from e

        self._save(snapshot)
        return snapshot.season.to_wire()

    def update_season_details(self, season_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(patch) - SEASON_DETAIL_FIELDS
        if unknown:
            raise PersistenceError(f"Season fields not editable: {sorted(unknown)}", code="Invalid")

        snapshot = self._load(season_id)
        try:
            season = Season.model_validate({**snapshot.season.to_wire(), **patch})
        except ValidationError as e:
            raise PersistenceError(f"Invalid season details: {e}", code="Invalid") from e

        snapshot.season = season
        self._save(snapshot)
        return season.to_wire()

    def update_task(self, season_id: str, task_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(patch) - TASK_PATCH_FIELDS
        if unknown:
            raise PersistenceError(f"Task fields not editable: {sorted(unknown)}", code="Invalid")

        snapshot = self._load(season_id)
        for i, task in enumerate(snapshot.tasks):
            if task.id == task_id:
                break
        else:
            raise PersistenceError(f"Task not found: {task_id}", code="NotFound")

        try:
            snapshot.tasks[i] = Task.model_validate({**task.to_wire(), **patch})
        except ValidationError as e:
            raise PersistenceError(f"Invalid task update: {e}", code="Invalid") from e

        self._save(snapshot)
        return {
            "season": snapshot.season.to_wire(),
            "tasks": [t.to_wire() for t in snapshot.tasks],
            "message": "Task updated successfully!"
        }
