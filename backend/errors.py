"""Service-level errors.

Raised by the services when a request cannot be honoured. ``main.py``
renders every subclass as ``{"success": false, "code": ..., "message": ...}``
with the class's HTTP status.
"""

from typing import Optional


class OrderServiceError(Exception):
    status_code = 500
    code = "server_error"
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None) -> None:
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)


class NotFoundError(OrderServiceError):
    """Unknown order, draft, expense or blocklist entry."""

    status_code = 404
    code = "not_found"
    default_message = "Not found"


class ConflictError(OrderServiceError):
    """Active duplicate order, already-blocked identifier, illegal transition."""

    status_code = 409
    code = "conflict"
    default_message = "Conflict"


class ForbiddenError(OrderServiceError):
    """Blocklisted identifier. The message never says which one matched."""

    status_code = 403
    code = "forbidden"
    default_message = "Unable to process this request"


class ValidationFailure(OrderServiceError):
    status_code = 400
    code = "validation_failed"
    default_message = "Invalid request"


class UpstreamFailure(OrderServiceError):
    """Courier or classifier call failed or timed out."""

    status_code = 502
    code = "upstream_failure"
    default_message = "Upstream service failed"


class StorageFailure(OrderServiceError):
    status_code = 500
    code = "storage_failure"
    default_message = "Server error"
