"""Error types for catalog operations, and their classification for callers.

Every failure raised by the store, the manager or the config layer is an
InstanceError subclass. The command layer turns them into ErrorInfo so
external callers get a typed failure instead of a traceback.
"""

import uuid
from dataclasses import dataclass


class InstanceError(Exception):
    """Base class for all catalog failures."""

    category = "unknown"


class IoError(InstanceError):
    """A filesystem operation (create/copy/remove/read/write) failed."""

    category = "io"


class SerializationError(InstanceError):
    """The index could not be rendered as JSON. Nothing was written."""

    category = "serialization"


class DeserializationError(InstanceError):
    """The index (or config) file is not valid for the expected structure."""

    category = "deserialization"


class NotFoundError(InstanceError):
    category = "not_found"

    def __init__(self, instance_id: uuid.UUID):
        super().__init__(f"Failed to find instance with ID `{instance_id}`")
        self.instance_id = instance_id


class InvalidInputError(InstanceError):
    """Malformed caller input, e.g. an image path without an extension."""

    category = "invalid_input"


@dataclass
class ErrorInfo:
    """Structured failure for the command layer."""

    category: str  # "io", "serialization", "deserialization", "not_found", "invalid_input", "unknown"
    text: str
    fatal: bool  # Operation aborted without completing its main effect
    instance_id: str | None = None  # Set when the failure concerns a specific instance

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "text": self.text,
            "fatal": self.fatal,
            "instance_id": self.instance_id,
        }


def classify_exception(error: Exception) -> ErrorInfo:
    """Classify an exception raised by a catalog operation.

    Errors that carry an ``instance_id`` but are not NotFound mean the
    instance was created and indexed and only a follow-up step (the cover
    image) failed, so they are reported as non-fatal.
    """
    if isinstance(error, InstanceError):
        instance_id = getattr(error, "instance_id", None)
        fatal = instance_id is None or isinstance(error, NotFoundError)
        return ErrorInfo(
            category=error.category,
            text=str(error),
            fatal=fatal,
            instance_id=str(instance_id) if instance_id is not None else None,
        )

    # Raw OSError escaping a collaborator still counts as an I/O failure
    if isinstance(error, OSError):
        return ErrorInfo(category="io", text=str(error), fatal=True)

    return ErrorInfo(category="unknown", text=f"{type(error).__name__}: {error}", fatal=True)
