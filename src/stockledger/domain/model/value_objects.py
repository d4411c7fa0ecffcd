"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from stockledger.domain.exceptions import ValidationError

DEFAULT_LOCATION = "default"


def _require_identifier(value: object, field: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)


@dataclass(frozen=True, order=True)
class BalanceKey:
    """Composite key of a stock balance: product x warehouse x location.

    A missing location resolves to ``DEFAULT_LOCATION`` (the
    warehouse-level bucket).  Keys are ordered so that several of them can
    be locked in a stable sequence.
    """

    product_id: str
    warehouse_id: str
    location_id: str = DEFAULT_LOCATION

    def __post_init__(self) -> None:
        _require_identifier(self.product_id, "product_id")
        _require_identifier(self.warehouse_id, "warehouse_id")
        _require_identifier(self.location_id, "location_id")

    @staticmethod
    def of(
        product_id: str, warehouse_id: str, location_id: str | None = None
    ) -> BalanceKey:
        return BalanceKey(product_id, warehouse_id, location_id or DEFAULT_LOCATION)

    def __str__(self) -> str:
        return f"{self.product_id}@{self.warehouse_id}/{self.location_id}"


@dataclass(frozen=True)
class StockLocation:
    """Where stock sits: a warehouse and, optionally, a bin/location in it."""

    warehouse_id: str
    location_id: str | None = None

    def __post_init__(self) -> None:
        _require_identifier(self.warehouse_id, "warehouse_id")
        if self.location_id is not None:
            _require_identifier(self.location_id, "location_id")

    def key_for(self, product_id: str) -> BalanceKey:
        return BalanceKey.of(product_id, self.warehouse_id, self.location_id)

    def __str__(self) -> str:
        return f"{self.warehouse_id}/{self.location_id or DEFAULT_LOCATION}"


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity of stock units.

    ``bool`` is rejected even though it subclasses ``int``.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}",
                field="quantity",
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be greater than 0", field="quantity")

    def __str__(self) -> str:
        return str(self.value)


def require_integer(value: object, field: str = "quantity") -> int:
    """Return *value* if it is a plain ``int``, else raise ValidationError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{field} must be an integer, got {type(value).__name__}", field=field
        )
    return value


@dataclass(frozen=True)
class Money:
    """Unit or total cost attached to a ledger entry.

    Uses Decimal so that cost totals never pick up floating-point noise.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}",
                field="unit_cost",
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}",
                field="unit_cost",
            )

    def __mul__(self, factor: int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    @staticmethod
    def of(amount: str | int | Decimal, currency: str = "USD") -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(
                f"Invalid money amount: {amount!r}", field="unit_cost"
            ) from exc
