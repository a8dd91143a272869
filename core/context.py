"""Per-request context stored in ContextVars.

The request id is set by ``api.middleware.RequestContextMiddleware`` and read
by the logging filter, so any log line emitted while serving a request can be
correlated without passing the id around explicitly.
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Return the id of the request being served, if any."""
    return _request_id.get()


def set_request_id(request_id: str | None) -> Token:
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)
