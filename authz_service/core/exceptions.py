"""
Error taxonomy.

Every reported condition is an AuthzError subclass carrying an HTTP status and
a resource-prefixed code, e.g. NotFoundError("role") -> "role_not_found".
The REST exception handler and the RPC endpoint both render them as:

    {"error": "role_not_found", "message": "Role not found"}
"""

from typing import Any


class AuthzError(Exception):
    """Base class for all reported conditions."""

    status_code: int = 500
    suffix: str = "error"
    default_message: str = "Request failed"

    def __init__(
        self,
        resource: str = "request",
        message: str | None = None,
        **context: Any,
    ):
        self.resource = resource
        self.message = message or f"{_label(resource)}: {self.default_message}"
        self.context = context
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return f"{self.resource}_{self.suffix}"

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class FetchError(AuthzError):
    """Read path failed (store unreachable, query error)."""

    suffix = "fetch_error"
    default_message = "fetch failed"


class NotFoundError(AuthzError):
    """Targeted lookup found nothing."""

    status_code = 404
    suffix = "not_found"
    default_message = "not found"


class AlreadyExistsError(AuthzError):
    """Duplicate entity or relation."""

    status_code = 409
    suffix = "already_exists"
    default_message = "already exists"


class CreateError(AuthzError):
    suffix = "create_error"
    default_message = "create failed"


class UpdateError(AuthzError):
    suffix = "update_error"
    default_message = "update failed"


class DeleteError(AuthzError):
    """Delete refused (dependents exist) or failed."""

    status_code = 409
    suffix = "delete_error"
    default_message = "delete failed"


class AssignError(AuthzError):
    suffix = "assign_error"
    default_message = "assignment failed"


class AssignMultipleError(AuthzError):
    suffix = "assign_multiple_error"
    default_message = "batch assignment failed"


class RevokeError(AuthzError):
    suffix = "revoke_error"
    default_message = "revocation failed"


class RevokeMultipleError(AuthzError):
    suffix = "revoke_multiple_error"
    default_message = "batch revocation failed"


class ReplaceError(AuthzError):
    suffix = "replace_error"
    default_message = "replacement failed"


class InvalidPayloadError(AuthzError):
    """RPC message data failed validation."""

    status_code = 422
    suffix = "invalid_payload"
    default_message = "invalid payload"


class DirectoryError(AuthzError):
    """A sibling service directory call failed. Always converted to a fallback by callers."""

    status_code = 502
    suffix = "unavailable"
    default_message = "directory unavailable"


def _label(resource: str) -> str:
    return resource.replace("_", " ").capitalize()
