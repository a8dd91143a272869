"""Pydantic schemas for the Task entity and its create/update payloads.

JSON uses camelCase ``dueDate``; Python code uses ``due_date``. Both names
are accepted on input.
"""

from collections.abc import Mapping
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    field_validator,
)

from features.tasks.config import config


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# ---------------------------------------------------------------------------
# Field types
# ---------------------------------------------------------------------------

def parse_due_date(value: str) -> datetime:
    """Parse an ISO-8601 date-time that carries a UTC offset or 'Z'."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError("must be an ISO-8601 date-time") from None
    if parsed.tzinfo is None:
        raise ValueError("must include a timezone offset, e.g. 'Z'")
    return parsed


def _check_due_date(value: str) -> str:
    parsed = parse_due_date(value)
    if value.endswith("Z"):
        return value
    return _to_utc_text(parsed)


def _to_utc_text(moment: datetime) -> str:
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# 'Z' values are stored as given; other offsets are rewritten to UTC 'Z'
DueDate = Annotated[str, AfterValidator(_check_due_date)]
Title = Annotated[str, StringConstraints(min_length=1, max_length=config.title_max_length)]
Details = Annotated[str, StringConstraints(max_length=config.details_max_length)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class TaskCreate(BaseModel):
    """Every Task field except ``id``. Unknown keys (including ``id``) are dropped."""

    model_config = ConfigDict(populate_by_name=True)

    title: Title
    details: Optional[Details] = None
    due_date: Optional[DueDate] = Field(None, alias="dueDate")
    status: TaskStatus = TaskStatus.PENDING
    priority: Optional[TaskPriority] = None
    tags: Optional[list[str]] = None


class TaskUpdate(BaseModel):
    """Partial update. Only keys present in the payload are applied.

    Presence is tracked by ``model_fields_set``: an omitted key keeps the
    stored value, an explicit ``null`` clears an optional field. ``title``
    and ``status`` can be omitted but never nulled.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[Title] = None
    details: Optional[Details] = None
    due_date: Optional[DueDate] = Field(None, alias="dueDate")
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    tags: Optional[list[str]] = None

    @field_validator("title", "status", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def changes(self) -> dict[str, Any]:
        """Supplied fields only, keyed by Python field name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------

class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    details: Optional[str] = None
    due_date: Optional[str] = Field(None, alias="dueDate")
    status: TaskStatus = TaskStatus.PENDING
    priority: Optional[TaskPriority] = None
    tags: Optional[list[str]] = None

    @property
    def due_at(self) -> datetime | None:
        return parse_due_date(self.due_date) if self.due_date else None

    def merged(self, update: TaskUpdate) -> "Task":
        """Return a copy with the update's supplied fields replaced wholesale."""
        return self.model_copy(update=update.changes())

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict; absent optional fields are omitted, not null."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Validation entry points
# ---------------------------------------------------------------------------

def format_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten pydantic error dicts into ``{field, message, type}`` records.

    A leading ``body`` location segment (added by FastAPI) is dropped.
    Malformed JSON (``json_invalid``, located at a character offset) is
    reported against ``body``.
    """
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if error.get("type") == "json_invalid":
            loc = []
        elif loc and loc[0] == "body":
            loc = loc[1:]
        formatted.append({
            "field": ".".join(loc) or "body",
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "value_error"),
        })
    return formatted


class TaskValidationError(ValueError):
    """Input failed validation. ``errors`` lists every failing field."""

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        fields = ", ".join(sorted({e["field"] for e in errors}))
        super().__init__(f"Invalid task input: {fields}")

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "TaskValidationError":
        return cls(format_errors(exc.errors()))

    @property
    def fields(self) -> set[str]:
        return {e["field"] for e in self.errors}


def _validate(model: type[BaseModel], raw: Any) -> Any:
    if not isinstance(raw, Mapping):
        raise TaskValidationError([{
            "field": "body",
            "message": "Input should be an object",
            "type": "model_type",
        }])
    try:
        return model.model_validate(dict(raw))
    except ValidationError as exc:
        raise TaskValidationError.from_pydantic(exc) from exc


def validate_create(raw: Any) -> TaskCreate:
    """Validate untrusted input for task creation."""
    return _validate(TaskCreate, raw)


def validate_update(raw: Any) -> TaskUpdate:
    """Validate untrusted input for a partial task update."""
    return _validate(TaskUpdate, raw)


# ---------------------------------------------------------------------------
# Form input
# ---------------------------------------------------------------------------

def _normalize_form_due_date(raw: str, assume_tz: tzinfo) -> str:
    # datetime-local inputs carry no offset; unparseable text is passed
    # through so the validator reports it against dueDate
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=assume_tz)
    return _to_utc_text(parsed)


def parse_form_fields(
    form: Mapping[str, Optional[str]],
    assume_tz: tzinfo = timezone.utc,
) -> dict[str, Any]:
    """Turn HTML form fields into a payload for ``validate_create``/``validate_update``.

    - ``tags``: comma-separated, trimmed, blanks dropped; empty -> absent
    - ``details``/``priority``/``dueDate``: empty string -> absent
    - ``dueDate``: normalized to UTC ISO-8601 with 'Z'; naive values are
      interpreted in ``assume_tz``
    - ``title``/``status``: passed through when present
    """
    payload: dict[str, Any] = {}

    for key in ("title", "status"):
        if form.get(key) is not None:
            payload[key] = form[key]

    if form.get("details"):
        payload["details"] = form["details"]

    if form.get("priority"):
        payload["priority"] = form["priority"]

    due = form.get("dueDate")
    if due:
        payload["dueDate"] = _normalize_form_due_date(due, assume_tz)

    raw_tags = form.get("tags")
    if raw_tags:
        tags = [t.strip() for t in raw_tags.split(",") if t.strip()]
        if tags:
            payload["tags"] = tags

    return payload
