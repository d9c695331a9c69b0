"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and translate them into
user-facing messages or status codes.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class InvalidQuantityError(ValidationError):
    """A quantity was not a positive integer."""


class EmptyCartError(ValidationError):
    """An order was requested from a cart with no items."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ForbiddenError(DomainException):
    """The requesting identity does not own the entity."""


class InsufficientStockError(DomainException):
    """One or more products could not cover the requested quantity."""

    def __init__(self, product_ids: list[str]) -> None:
        self.product_ids = list(product_ids)
        super().__init__(
            "Insufficient stock for product(s): " + ", ".join(self.product_ids)
        )


class InvalidTransitionError(DomainException):
    """An order status change is not allowed from the current status."""


class AlreadyReleasedError(DomainException):
    """A stock reservation has already been released."""
