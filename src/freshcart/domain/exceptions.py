"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each carries a machine-readable ``code`` and optional ``details`` so callers
can report a structured reason instead of parsing the message.
"""

from __future__ import annotations

from typing import Any


class DomainException(Exception):
    """Base class for all recoverable domain errors."""

    code = "domain_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "validation_error"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "not_found"


class IngredientUnavailableError(DomainException):
    """The item exists but has been administratively disabled."""

    code = "unavailable"


class InsufficientStockError(DomainException):
    """Not enough stock to satisfy the requested quantity."""

    code = "insufficient_stock"


class QuotaExceededError(DomainException):
    """Adding the item would push subscription usage past its limit."""

    code = "quota_exceeded"


class CategoryNotAllowedError(DomainException):
    """The subscriber's plan does not include the product's category."""

    code = "category_not_allowed"


class SubscriptionInactiveError(EntityNotFoundError):
    """No active subscription exists for the subscriber."""

    code = "subscription_inactive"


class PaymentNotCapturedError(DomainException):
    """The payment provider has not (or not yet) captured the charge."""

    code = "payment_not_captured"


class PaymentAlreadyFinalized(DomainException):
    """Idempotency short-circuit: the payment was already reconciled."""

    code = "payment_already_finalized"


class StaleCartError(DomainException):
    """Re-validation found cart items that can no longer be satisfied."""

    code = "stale_cart"

    def __init__(self, issues: list[str]) -> None:
        super().__init__(
            "Cart is no longer valid: " + "; ".join(issues),
            details={"issues": list(issues)},
        )
        self.issues = list(issues)


class PersistenceUnavailableError(Exception):
    """The backing store could not be reached. Fatal for the operation."""
