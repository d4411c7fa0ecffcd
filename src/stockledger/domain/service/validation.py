"""Domain service: pre-flight validation.

Validators never mutate state and never raise for expected business
conditions.  They return a ValidationResult that callers inspect before
asking the ledger or the reservation manager to change anything.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Collection, Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, TypeVar

from stockledger.domain.exceptions import (
    BusinessRuleError,
    DomainException,
    InsufficientStockError,
    InvalidStateError,
    ValidationError,
)
from stockledger.domain.service.balance_store import BalanceStore

T = TypeVar("T")

DEFAULT_LOW_STOCK_RATIO = 0.2
MAX_BATCH_SIZE = 100


class StockOperation(Enum):
    WITHDRAW = "withdraw"
    ADJUST = "adjust"


@dataclass(frozen=True)
class ValidationIssue:
    message: str
    field: str | None = None
    code: str = "VALIDATION_ERROR"
    details: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    @staticmethod
    def from_error(exc: DomainException) -> ValidationIssue:
        """Describe a raised domain error as data."""
        if isinstance(exc, InsufficientStockError):
            return ValidationIssue(
                str(exc),
                field="quantity",
                code=exc.rule,
                details={"requested": exc.requested, "available": exc.available},
            )
        if isinstance(exc, BusinessRuleError):
            return ValidationIssue(
                str(exc),
                code=exc.rule,
                details={"entity_type": exc.entity_type, "entity_id": exc.entity_id},
            )
        if isinstance(exc, ValidationError):
            return ValidationIssue(str(exc), field=exc.field, code=exc.code, details=exc.details)
        return ValidationIssue(str(exc), code="NOT_FOUND")


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @staticmethod
    def of(issues: Sequence[ValidationIssue], warnings: Sequence[str] = ()) -> ValidationResult:
        return ValidationResult(errors=tuple(issues), warnings=tuple(warnings))

    @staticmethod
    def failed(exc: DomainException) -> ValidationResult:
        return ValidationResult(errors=(ValidationIssue.from_error(exc),))


class StockValidator:

    def __init__(
        self,
        balances: BalanceStore,
        low_stock_ratio: float = DEFAULT_LOW_STOCK_RATIO,
    ) -> None:
        self._balances = balances
        self._low_stock_ratio = low_stock_ratio

    def validate_stock_operation(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: int,
        operation: StockOperation | str,
        location_id: str | None = None,
    ) -> ValidationResult:
        """Check a withdrawal or adjustment against the current balance.

        Uses the location balance when *location_id* is given, otherwise
        the warehouse aggregate.  A result that would leave less than the
        low-stock ratio of the current total carries a warning.
        """
        errors: list[ValidationIssue] = []
        warnings: list[str] = []

        try:
            op = StockOperation(operation)
        except ValueError:
            return ValidationResult.of(
                [ValidationIssue(f"Unknown stock operation: {operation!r}", field="operation")]
            )
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            return ValidationResult.of(
                [ValidationIssue("Quantity must be a whole number", field="quantity")]
            )

        try:
            balance = (
                self._balances.get_balance(product_id, warehouse_id, location_id)
                if location_id
                else self._balances.get_aggregate_balance(product_id, warehouse_id)
            )
        except ValidationError as exc:
            return ValidationResult.failed(exc)

        if balance is None:
            return ValidationResult.of(
                [
                    ValidationIssue(
                        f"No stock balance found for product {product_id}",
                        field="product_id",
                        code="NOT_FOUND",
                    )
                ]
            )

        if op is StockOperation.WITHDRAW and balance.available_quantity < quantity:
            errors.append(
                ValidationIssue.from_error(
                    InsufficientStockError(product_id, quantity, balance.available_quantity)
                )
            )

        if quantity <= 0:
            errors.append(ValidationIssue("Quantity must be greater than 0", field="quantity"))
        elif balance.total_quantity - quantity < balance.total_quantity * self._low_stock_ratio:
            warnings.append(
                f"Operation will reduce stock to less than "
                f"{self._low_stock_ratio:.0%} of current balance"
            )

        return ValidationResult.of(errors, warnings)

    @staticmethod
    def validate_state_transition(
        entity_type: str,
        entity_id: str,
        current_state: str,
        new_state: str,
        allowed_transitions: Mapping[str, Collection[str]],
    ) -> ValidationResult:
        allowed = allowed_transitions.get(current_state)
        if allowed is None:
            exc = InvalidStateError(
                f"Invalid current state: {current_state}",
                entity_type, entity_id, current_state, "any valid state",
            )
            return ValidationResult.failed(exc)
        if new_state not in allowed:
            exc = InvalidStateError(
                f"Cannot transition from {current_state} to {new_state}",
                entity_type, entity_id, current_state, ", ".join(allowed) or "none",
            )
            return ValidationResult.failed(exc)
        return ValidationResult()

    @staticmethod
    def validate_bulk(
        items: Sequence[T],
        validator: Callable[[T], ValidationResult],
        max_batch_size: int = MAX_BATCH_SIZE,
    ) -> ValidationResult:
        """Validate every item; field names are prefixed ``item[i].``."""
        if len(items) > max_batch_size:
            return ValidationResult.of(
                [
                    ValidationIssue(
                        f"Batch size exceeds maximum of {max_batch_size} items",
                        field="batch_size",
                    )
                ]
            )
        if not items:
            return ValidationResult.of(
                [ValidationIssue("Batch cannot be empty", field="batch_size")]
            )

        errors: list[ValidationIssue] = []
        warnings: list[str] = []
        for index, item in enumerate(items):
            result = validator(item)
            errors.extend(
                replace(issue, field=f"item[{index}].{issue.field or ''}".rstrip("."))
                for issue in result.errors
            )
            warnings.extend(f"Item {index}: {w}" for w in result.warnings)
        return ValidationResult.of(errors, warnings)
