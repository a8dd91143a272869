"""Test due-date classification and board grouping."""
from datetime import datetime, timedelta, timezone

from features.tasks.deadlines import (
    DeadlineFlags,
    annotate_tasks,
    classify,
    filter_by_status,
    group_by_status,
)
from features.tasks.models.schemas import Task, TaskStatus

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_no_due_date():
    assert classify(None, NOW) == DeadlineFlags(is_expired=False, is_near_deadline=False)


def test_just_past_is_expired_only():
    flags = classify(NOW - timedelta(seconds=1), NOW)
    assert flags.is_expired
    assert not flags.is_near_deadline


def test_two_days_out_is_near():
    flags = classify(NOW + timedelta(days=2), NOW)
    assert not flags.is_expired
    assert flags.is_near_deadline


def test_four_days_out_is_neither():
    flags = classify(NOW + timedelta(days=4), NOW)
    assert not flags.is_expired
    assert not flags.is_near_deadline


def test_window_edge_is_inclusive():
    assert classify(NOW + timedelta(days=3), NOW).is_near_deadline
    assert not classify(NOW + timedelta(days=3, seconds=1), NOW).is_near_deadline


def test_due_exactly_now_is_near_not_expired():
    flags = classify(NOW, NOW)
    assert not flags.is_expired
    assert flags.is_near_deadline


def test_custom_window():
    assert classify(NOW + timedelta(days=5), NOW, window=timedelta(days=7)).is_near_deadline


def test_annotate_tasks():
    tasks = [
        Task(id="a", title="Late", due_date="2025-03-09T12:00:00Z"),
        Task(id="b", title="Soon", due_date="2025-03-11T21:00:00+09:00"),
        Task(id="c", title="Later", due_date="2025-04-01T00:00:00Z"),
        Task(id="d", title="Whenever"),
    ]
    views = {v["id"]: v for v in annotate_tasks(tasks, now=NOW)}
    assert (views["a"]["isExpired"], views["a"]["isNearDeadline"]) == (True, False)
    assert (views["b"]["isExpired"], views["b"]["isNearDeadline"]) == (False, True)
    assert (views["c"]["isExpired"], views["c"]["isNearDeadline"]) == (False, False)
    assert (views["d"]["isExpired"], views["d"]["isNearDeadline"]) == (False, False)
    assert "dueDate" not in views["d"]


def test_annotate_does_not_touch_tasks():
    task = Task(id="a", title="Late", due_date="2025-03-09T12:00:00Z")
    annotate_tasks([task], now=NOW)
    assert "isExpired" not in task.to_dict()


def test_filter_by_status():
    tasks = [
        Task(id="a", title="A", status="completed"),
        Task(id="b", title="B"),
        Task(id="c", title="C", status="completed"),
    ]
    assert [t.id for t in filter_by_status(tasks, "completed")] == ["a", "c"]
    assert [t.id for t in filter_by_status(tasks, TaskStatus.PENDING)] == ["b"]


def test_group_by_status_has_every_column():
    tasks = [Task(id="a", title="A", status="in_progress")]
    columns = group_by_status(tasks)
    assert set(columns) == set(TaskStatus)
    assert [t.id for t in columns[TaskStatus.IN_PROGRESS]] == ["a"]
    assert columns[TaskStatus.CANCELLED] == []


def test_naive_now_is_taken_as_utc():
    naive_now = NOW.replace(tzinfo=None)
    assert classify(NOW + timedelta(days=1), naive_now) == classify(NOW + timedelta(days=1), NOW)
    assert classify(NOW - timedelta(hours=1), naive_now).is_expired


def test_naive_due_date_is_taken_as_utc():
    flags = classify((NOW + timedelta(hours=1)).replace(tzinfo=None), NOW)
    assert flags == DeadlineFlags(is_expired=False, is_near_deadline=True)
