"""Tasks feature: personal task board persistence and validation core.

- Pydantic schemas and enums for the Task entity
- SQLAlchemy row model for the ``tasks`` table
- Async repository with partial-update merge semantics
- FastAPI router with cache invalidation
- Due-date classification used by board views
- Dataclass configuration
"""
