from datetime import datetime

import pytest

from seasonplan import FileSeasonStore, Season, SeasonStatus, Task, TaskStatus

CREATED = datetime(2024, 1, 1)


def _make_task(order, lead_time=0, preceding=None, status=TaskStatus.PENDING, responsible=None, task_id=None, **kwargs):
    return Task(
        id=task_id or f"t-{order}",
        order=order,
        name=f"Task {order}",
        lead_time=lead_time,
        preceding_tasks=preceding or [],
        status=status,
        responsible=["Sourcing"] if responsible is None else responsible,
        **kwargs
    )


def _make_season(status=SeasonStatus.OPEN, created_at=CREATED, **kwargs):
    return Season(id="ss24", name="Spring 24", status=status, created_at=created_at, **kwargs)


@pytest.fixture
def make_task():
    return _make_task


@pytest.fixture
def make_season():
    return _make_season


@pytest.fixture
def season_document():
    return {
        "season": {
            "_id": "ss24",
            "name": "Spring 24",
            "buyer": "buyer-1",
            "status": "Open",
            "createdAt": "2024-01-01T00:00:00",
            "requireAttention": ["Sourcing"],
        },
        "tasks": [
            {
                "_id": "t-C",
                "order": "C",
                "name": "Bulk fabric",
                "responsible": ["Sourcing", "QA"],
                "precedingTasks": ["B", "A"],
                "leadTime": 2,
                "status": "pending",
                "computedDates": {"start": "2024-01-09T00:00:00", "end": "2024-01-11T00:00:00"},
                "actualCompletion": None,
                "remarks": None,
                "attachments": [],
            },
            {
                "_id": "t-A",
                "order": "A",
                "name": "Design handover",
                "responsible": ["Sourcing"],
                "precedingTasks": [],
                "leadTime": 5,
                "status": "pending",
                "computedDates": {"start": "2024-01-01T00:00:00", "end": "2024-01-06T00:00:00"},
            },
            {
                "_id": "t-B",
                "order": "B",
                "name": "Lab dips",
                "responsible": ["Merchandising"],
                "precedingTasks": ["A"],
                "leadTime": 3,
                "status": "pending",
                "computedDates": {"start": "2024-01-06T00:00:00", "end": "2024-01-09T00:00:00"},
            },
        ],
    }


@pytest.fixture
def file_store(tmp_path, season_document):
    store = FileSeasonStore(tmp_path / "seasons")
    store.import_snapshot(season_document)
    return store
