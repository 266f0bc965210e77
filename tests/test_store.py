from datetime import datetime

import pytest

from seasonplan import FileSeasonStore, PersistenceError, SeasonSnapshot


def test_fetch_returns_wire_snapshot(file_store):
    data = file_store.fetch_season("ss24")

    assert data["season"]["_id"] == "ss24"
    assert data["season"]["createdAt"] == "2024-01-01T00:00:00"
    assert {t["order"] for t in data["tasks"]} == {"A", "B", "C"}
    assert data["tasks"][0]["precedingTasks"] == ["B", "A"]


def test_update_task_returns_full_state(file_store):
    response = file_store.update_task(
        "ss24", "t-A", {"actualCompletion": "2024-01-06T00:00:00", "status": "completed"}
    )

    assert response["message"] == "Task updated successfully!"
    assert len(response["tasks"]) == 3
    snapshot = SeasonSnapshot.model_validate(file_store.fetch_season("ss24"))
    task_a = next(t for t in snapshot.tasks if t.id == "t-A")
    assert task_a.actual_completion == datetime(2024, 1, 6)
    assert task_a.status.value == "completed"


def test_update_task_rejects_other_fields(file_store):
    with pytest.raises(PersistenceError) as exc_info:
        file_store.update_task("ss24", "t-A", {"leadTime": 1})
    assert exc_info.value.code == "Invalid"


def test_unknown_season_and_task(file_store):
    with pytest.raises(PersistenceError):
        file_store.fetch_season("missing")
    with pytest.raises(PersistenceError) as exc_info:
        file_store.update_task("ss24", "t-Z", {"remarks": "x"})
    assert exc_info.value.code == "NotFound"


def test_update_status_and_details(file_store):
    season = file_store.update_season_status("ss24", "Closed")
    assert season["status"] == "Closed"

    season = file_store.update_season_details("ss24", {"name": "Spring 24 v2", "requireAttention": []})
    assert season["name"] == "Spring 24 v2"
    assert season["requireAttention"] == []
    assert season["status"] == "Closed"

    with pytest.raises(PersistenceError):
        file_store.update_season_status("ss24", "Archived")
    with pytest.raises(PersistenceError):
        file_store.update_season_details("ss24", {"status": "Open"})


def test_import_rejects_duplicate_order_codes(tmp_path, season_document):
    season_document["tasks"][1]["order"] = "C"
    store = FileSeasonStore(tmp_path)

    with pytest.raises(PersistenceError):
        store.import_snapshot(season_document)


def test_list_seasons(file_store, season_document):
    file_store.update_task("ss24", "t-A", {"status": "completed"})

    seasons = file_store.list_seasons()

    assert len(seasons) == 1
    assert seasons[0]["id"] == "ss24"
    assert seasons[0]["tasks"] == 3
    assert seasons[0]["completed"] == 1


def test_corrupt_file_is_reported(tmp_path):
    store = FileSeasonStore(tmp_path)
    (tmp_path / "bad.json").write_text("{not json")

    with pytest.raises(PersistenceError) as exc_info:
        store.fetch_season("bad")
    assert exc_info.value.code == "Corrupt"
    assert store.list_seasons() == []
