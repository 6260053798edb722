"""
Exception hierarchy for goround.

Validation failures (missing entities, unsupported font files) are raised
where they are detected. I/O failures are converted to tri-state results at
the storage provider boundary and only surface as exceptions when a caller
explicitly re-raises them.
"""

from typing import Any, Optional

from goround.utils.file_utils import format_bytes


class GoroundError(Exception):
    """Base exception for all goround errors."""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = context or {}

    def __str__(self):
        parts = [self.message]
        if self.cause:
            parts.append(f" (caused by: {type(self.cause).__name__}: {self.cause})")
        if self.context:
            parts.append(f" Context: {self.context}")
        return "".join(parts)


class NotFoundError(GoroundError):
    """An entity id is absent from its collection."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} not found: {entity_id}",
            context={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class QuotaExceededError(GoroundError):
    """A write would exceed the capacity-constrained backend's quota."""

    def __init__(self, attempted_size: int, used_size: int, total_size: int, what: str = "data"):
        self.attempted_size = attempted_size
        self.used_size = used_size
        self.total_size = total_size
        self.available_size = max(0, total_size - used_size)
        super().__init__(
            f"Cannot save {what}: storage quota would be exceeded. "
            f"Size: {format_bytes(attempted_size)}, "
            f"used: {format_bytes(used_size)} / {format_bytes(total_size)}, "
            f"available: {format_bytes(self.available_size)}"
        )


class UnsupportedFormatError(GoroundError):
    """A font upload has an extension outside ttf/otf/woff/woff2."""

    def __init__(self, filename: str, extension: str | None = None):
        super().__init__(
            "Unsupported font format. Please use TTF, OTF, WOFF, or WOFF2.",
            context={"filename": filename, "extension": extension},
        )
        self.filename = filename
        self.extension = extension


class NotReconstructibleError(GoroundError):
    """Structured slide fields cannot be recovered from a document."""


class CanceledError(GoroundError):
    """The user dismissed a picker. Not a failure."""

    def __init__(self, message: str = "Canceled by user"):
        super().__init__(message)


class IOFailureError(GoroundError):
    """Opaque backend or transport failure."""
