"""
Error taxonomy for the engagement pipeline.

Propagation policy:
- Telemetry writes (view recording) log and swallow every error.
- User-initiated actions (like toggling, connect dispatch) propagate to the
  caller, which owns the timed feedback.
- Analytics reads degrade to zeroed output instead of raising.
"""

from __future__ import annotations

from collections.abc import Sequence


class EngagementError(Exception):
    """Base engagement pipeline error."""

    pass


class ValidationError(EngagementError):
    """Malformed input."""

    def __init__(self, field_name: str, reason: str) -> None:
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Invalid {field_name}: {reason}")


class IndexRequiredError(EngagementError):
    """
    Query needs a composite index that has not been declared.

    Recoverable: callers may retry with a reduced query and filter or sort
    in memory.
    """

    def __init__(self, collection: str, fields: Sequence[str]) -> None:
        self.collection = collection
        self.fields = tuple(fields)
        self.hint = (
            f"Create a composite index on '{collection}' with fields: "
            f"{', '.join(self.fields)}"
        )
        super().__init__(f"Index required for query on '{collection}'. {self.hint}")


class NetworkError(EngagementError):
    """Transient I/O failure talking to a collaborator."""

    def __init__(self, operation: str, reason: str = "") -> None:
        self.operation = operation
        self.reason = reason
        message = f"Network failure during {operation}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotFoundError(EngagementError):
    """Referenced entity is absent."""

    def __init__(self, entity: str, key: str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")
