"""Error kinds raised by template editing, import and export operations."""

from pydantic import ValidationError as PydanticValidationError


class SceneKitError(Exception):
    """Base class for every error raised by the SDK."""


class ValidationError(SceneKitError, ValueError):
    """Malformed input to an editing operation. The template is left untouched."""

    @classmethod
    def from_pydantic(cls, error: PydanticValidationError, context: str = "") -> "ValidationError":
        details = "; ".join(
            f"{'.'.join(str(p) for p in e['loc']) or '<root>'}: {e['msg']}"
            for e in error.errors()
        )
        prefix = f"{context}: " if context else ""
        return cls(f"{prefix}{details}")


class InvalidOperation(SceneKitError):
    """Structurally disallowed action, e.g. deleting the only scene."""


class NotFound(SceneKitError, LookupError):
    """Reference to a scene, element, template or job that does not exist."""
