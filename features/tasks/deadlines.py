"""Due-date classification for board views.

Pure functions of a task's due date and the current time. Results are
recomputed on every fetch and never stored alongside the task.

Both flags are computed independently and are not made mutually exclusive;
no precedence rule is applied here. Views give ``is_expired`` visual
precedence.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from features.tasks.config import config
from features.tasks.models.schemas import Task, TaskStatus


@dataclass(frozen=True)
class DeadlineFlags:
    is_expired: bool = False
    is_near_deadline: bool = False


def _as_utc(moment: datetime) -> datetime:
    return moment.replace(tzinfo=timezone.utc) if moment.tzinfo is None else moment


def classify(
    due_date: datetime | None,
    now: datetime,
    window: timedelta | None = None,
) -> DeadlineFlags:
    """Classify a due date relative to ``now``.

    - expired: ``due_date < now``
    - near deadline: ``now <= due_date <= now + window`` (window defaults to 3 days)

    Naive datetimes, for ``now`` or ``due_date``, are taken to be UTC.
    """
    if due_date is None:
        return DeadlineFlags()
    now = _as_utc(now)
    due_date = _as_utc(due_date)
    window = config.near_deadline_window if window is None else window
    return DeadlineFlags(
        is_expired=due_date < now,
        is_near_deadline=now <= due_date <= now + window,
    )


def annotate_tasks(
    tasks: Iterable[Task],
    now: datetime | None = None,
    window: timedelta | None = None,
) -> list[dict[str, Any]]:
    """Task dicts extended with ``isExpired`` / ``isNearDeadline``.

    ``now`` defaults to the current UTC time, read once for the whole list.
    """
    now = now or datetime.now(timezone.utc)
    annotated = []
    for task in tasks:
        flags = classify(task.due_at, now, window)
        view = task.to_dict()
        view["isExpired"] = flags.is_expired
        view["isNearDeadline"] = flags.is_near_deadline
        annotated.append(view)
    return annotated


def filter_by_status(tasks: Iterable[Task], status: TaskStatus | str) -> list[Task]:
    status = TaskStatus(status)
    return [t for t in tasks if t.status == status]


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """Board columns: every status present as a key, tasks in input order."""
    columns: dict[TaskStatus, list[Task]] = {s: [] for s in TaskStatus}
    for task in tasks:
        columns[task.status].append(task)
    return columns
