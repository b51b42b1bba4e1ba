"""Error taxonomy for the order lifecycle engine.

Every error carries the HTTP status the API layer answers with. Permanent
errors (bad transitions, bad signatures, domain validation) must not be
retried blindly; ``Conflict`` asks the caller to reload and retry with fresh
state; ``RepositoryUnavailable`` is transient and safe to retry with backoff.
"""


class StorefrontError(Exception):
    """Base class for errors raised by the storefront engine."""

    status_code = 400

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "detail": self.message, **self.context}


class InvalidTransition(StorefrontError):
    """The requested status change is not an edge of the order status graph."""

    status_code = 422


class OrderNotPayable(InvalidTransition):
    """A payment confirmation arrived for an order that can no longer be paid."""

    status_code = 409


class Conflict(StorefrontError):
    """A conditional write lost a race against another valid change."""

    status_code = 409


class InvalidSignature(StorefrontError):
    """Webhook body does not match its HMAC signature."""

    status_code = 400


class MalformedPayload(StorefrontError):
    status_code = 400


class DuplicatePendingRequest(StorefrontError):
    status_code = 409


class OrderNotEligible(StorefrontError):
    status_code = 422


class AlreadyDecided(StorefrontError):
    status_code = 409


class OrderAccessDenied(StorefrontError):
    status_code = 403


class GatewayReferenceMismatch(StorefrontError):
    status_code = 400


class GatewayError(StorefrontError):
    """The payment gateway refused or could not be reached."""

    status_code = 502


class RepositoryUnavailable(StorefrontError):
    """Storage is temporarily unreachable. Retry with backoff."""

    status_code = 503
