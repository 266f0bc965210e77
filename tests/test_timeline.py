import logging
from datetime import datetime, timedelta

import pytest

from seasonplan import (
    DependencyUnresolvedError,
    TaskGraph,
    TimelineSpan,
    UnresolvedPolicy,
    calculate_reference_timeline,
    format_span,
)

CREATED = datetime(2024, 1, 1)


def test_two_task_chain(make_task):
    a = make_task("A", lead_time=5)
    b = make_task("B", lead_time=3, preceding=["A"])

    timeline = calculate_reference_timeline([a, b], CREATED)

    assert timeline.get(a.id) == TimelineSpan(start=datetime(2024, 1, 1), end=datetime(2024, 1, 6))
    assert timeline.get(b.id) == TimelineSpan(start=datetime(2024, 1, 6), end=datetime(2024, 1, 9))
    assert timeline.is_complete


def test_roots_start_at_season_creation(make_task):
    tasks = [make_task("A", lead_time=0), make_task("B", lead_time=12)]

    timeline = calculate_reference_timeline(tasks, CREATED)

    for task in tasks:
        span = timeline.get(task.id)
        assert span.start == CREATED
        assert span.end == CREATED + timedelta(days=task.lead_time)


def test_start_is_latest_predecessor_end(make_task):
    a = make_task("A", lead_time=5)
    b = make_task("B", lead_time=1)
    c = make_task("C", lead_time=2, preceding=["B", "A"])

    timeline = calculate_reference_timeline([c, b, a], CREATED)

    assert timeline.get(c.id).start == datetime(2024, 1, 6)
    assert timeline.get(c.id).end == datetime(2024, 1, 8)


def test_dependency_on_later_order_code_takes_extra_pass(make_task):
    a = make_task("A", lead_time=2, preceding=["AA"])
    aa = make_task("AA", lead_time=4)

    timeline = calculate_reference_timeline([a, aa], CREATED)

    assert timeline.get(aa.id).end == datetime(2024, 1, 5)
    assert timeline.get(a.id) == TimelineSpan(start=datetime(2024, 1, 5), end=datetime(2024, 1, 7))
    assert timeline.passes == 2


def test_cycle_leaves_cycle_and_dependents_unresolved(make_task):
    a = make_task("A", lead_time=1, preceding=["B"])
    b = make_task("B", lead_time=1, preceding=["A"])
    c = make_task("C", lead_time=1, preceding=["A"])
    d = make_task("D", lead_time=1)
    tasks = [a, b, c, d]

    timeline = calculate_reference_timeline(tasks, CREATED, UnresolvedPolicy.IGNORE)

    assert a.id not in timeline
    assert b.id not in timeline
    assert c.id not in timeline
    assert d.id in timeline
    assert timeline.unresolved == [a.id, b.id, c.id]
    assert timeline.dangling == {}
    assert timeline.passes <= len(tasks) + 5


def test_self_reference_never_resolves(make_task):
    a = make_task("A", lead_time=1, preceding=["A"])

    timeline = calculate_reference_timeline([a], CREATED, UnresolvedPolicy.IGNORE)

    assert len(timeline) == 0
    assert timeline.unresolved == [a.id]


def test_dangling_reference_only_affects_referencing_task(make_task):
    a = make_task("A", lead_time=2)
    b = make_task("B", lead_time=1, preceding=["A", "ZZ"])
    c = make_task("C", lead_time=1, preceding=["A"])

    timeline = calculate_reference_timeline([a, b, c], CREATED, UnresolvedPolicy.IGNORE)

    assert b.id not in timeline
    assert timeline.get(c.id).start == datetime(2024, 1, 3)
    assert timeline.dangling == {b.id: ["ZZ"]}


def test_warn_policy_logs_unresolved_orders(make_task, caplog):
    a = make_task("A", preceding=["B"])
    b = make_task("B", preceding=["A"])

    with caplog.at_level(logging.WARNING, logger="seasonplan"):
        timeline = calculate_reference_timeline([a, b], CREATED)

    assert len(timeline) == 0
    assert "2 task(s): A, B" in caplog.text


def test_ignore_policy_is_silent(make_task, caplog):
    a = make_task("A", preceding=["Q"])

    with caplog.at_level(logging.WARNING, logger="seasonplan"):
        calculate_reference_timeline([a], CREATED, UnresolvedPolicy.IGNORE)

    assert caplog.text == ""


def test_error_policy_raises_with_partial_timeline(make_task):
    a = make_task("A", lead_time=1)
    b = make_task("B", preceding=["Q"])

    with pytest.raises(DependencyUnresolvedError) as exc_info:
        calculate_reference_timeline([a, b], CREATED, UnresolvedPolicy.ERROR)

    partial = exc_info.value.timeline
    assert a.id in partial
    assert partial.unresolved == [b.id]
    assert "Missing order codes: Q" in exc_info.value.message


def test_accepts_prebuilt_graph(make_task):
    graph = TaskGraph([make_task("A", lead_time=3)])

    timeline = calculate_reference_timeline(graph, CREATED)

    assert timeline.get("t-A").end == datetime(2024, 1, 4)


def test_empty_task_list():
    timeline = calculate_reference_timeline([], CREATED)

    assert len(timeline) == 0
    assert timeline.passes == 0
    assert timeline.is_complete


def test_format_span():
    span = TimelineSpan(start=datetime(2024, 1, 1), end=datetime(2024, 1, 6))

    assert format_span(span) == "01-Jan-24 - 06-Jan-24"
    assert format_span(None) == "..."
