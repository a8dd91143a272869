"""Dataclass-based configuration for the tasks feature.

Field limits, the near-deadline window and cache tag names live here as a
frozen dataclass so validators, the repository and the router agree on
them.
"""

import logging
import os
from dataclasses import dataclass
from datetime import timedelta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TasksConfig:
    """Complete configuration for the tasks feature.

    Usage::

        config = TasksConfig.from_env()
        if due_date <= now + config.near_deadline_window:
            highlight(task)
    """

    title_max_length: int = 100
    details_max_length: int = 1000
    near_deadline_days: int = 3

    # Cache tags shared with read-through endpoints
    collection_tag: str = "/tasks"
    item_tag_prefix: str = "/tasks/"

    @property
    def near_deadline_window(self) -> timedelta:
        return timedelta(days=self.near_deadline_days)

    def item_tag(self, task_id: str) -> str:
        return f"{self.item_tag_prefix}{task_id}"

    @classmethod
    def from_env(cls, prefix: str = "TASKS_") -> "TasksConfig":
        """Create config from environment variables.

        Reads {prefix}TITLE_MAX_LENGTH, {prefix}DETAILS_MAX_LENGTH and
        {prefix}NEAR_DEADLINE_DAYS. Unset or non-integer values keep the
        defaults.

        Example: TASKS_NEAR_DEADLINE_DAYS=5
        """
        overrides = {}
        for name in ("title_max_length", "details_max_length", "near_deadline_days"):
            raw = os.getenv(f"{prefix}{name.upper()}", "").strip()
            if not raw:
                continue
            try:
                overrides[name] = int(raw)
            except ValueError:
                logger.warning("Ignoring %s%s=%r: not an integer", prefix, name.upper(), raw)

        return cls(**overrides)


# Process-wide configuration, read once at import
config = TasksConfig.from_env()
