"""Domain-level exceptions.

Input errors and business rule violations are subclasses of
DomainException so the CLI layer can catch them uniformly and display
user-friendly messages.  Broken invariants and storage failures are kept
outside that hierarchy: they are defects or outages, not user mistakes.
"""

from __future__ import annotations

from typing import Any


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Malformed input: bad quantity, unknown type, missing identifier."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.code = code
        self.details = details or {}


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class BusinessRuleError(DomainException):
    """A well-formed request that the current stock state cannot honour."""

    def __init__(
        self,
        message: str,
        rule: str,
        entity_type: str,
        entity_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.rule = rule
        self.entity_type = entity_type
        self.entity_id = entity_id


class InsufficientStockError(BusinessRuleError):

    def __init__(
        self,
        product_id: str,
        requested: int,
        available: int,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message
            or f"Insufficient stock for product {product_id}. "
            f"Requested: {requested}, Available: {available}",
            rule="INSUFFICIENT_STOCK",
            entity_type="stock",
            entity_id=product_id,
        )
        self.requested = requested
        self.available = available


class InvalidStateError(BusinessRuleError):

    def __init__(
        self,
        message: str,
        entity_type: str,
        entity_id: str,
        current_state: str,
        required_state: str,
    ) -> None:
        super().__init__(
            f"{message}. Current state: {current_state}, "
            f"Required state: {required_state}",
            rule="INVALID_STATE_TRANSITION",
            entity_type=entity_type,
            entity_id=entity_id,
        )
        self.current_state = current_state
        self.required_state = required_state


class ConsistencyError(Exception):
    """A balance invariant was found broken.

    Indicates a programming defect.  The affected balance key is halted
    and refuses further mutation until explicitly cleared.
    """

    def __init__(self, message: str, key: object | None = None) -> None:
        super().__init__(message)
        self.key = key


class StockSystemError(Exception):
    """Unexpected infrastructure failure (e.g. storage I/O).

    Raised without any part of the triggering operation having been
    committed.
    """
