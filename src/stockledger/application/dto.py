"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.ledger_entry import LedgerEntry
from stockledger.domain.model.reservation import StockReservation
from stockledger.domain.model.value_objects import DEFAULT_LOCATION
from stockledger.domain.service.validation import ValidationResult

_DATE_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class BalanceDTO:
    product_id: str
    warehouse_id: str
    location: str  # "*" for a warehouse aggregate
    available: int
    reserved: int
    total: int
    last_updated: str
    last_updated_by: str


@dataclass(frozen=True)
class LedgerEntryDTO:
    id: str
    date: str
    transaction_type: str
    product_id: str
    location: str
    quantity: int
    previous_balance: int
    new_balance: int
    performed_by: str
    reference: str
    total_cost: str


@dataclass(frozen=True)
class ReservationDTO:
    id: str
    product_id: str
    location: str
    quantity: int
    status: str
    reserved_by: str
    reserved_at: str
    expires_at: str


@dataclass(frozen=True)
class StockMovementOutcome:
    """Result of a stock-moving use case.

    Expected business failures come back here as data in ``validation``;
    ``entries`` is empty whenever the movement was not recorded.
    """

    validation: ValidationResult
    entries: tuple[LedgerEntryDTO, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.validation.is_valid and bool(self.entries)


@dataclass(frozen=True)
class ReservationOutcome:
    validation: ValidationResult
    reservation: ReservationDTO | None = None

    @property
    def succeeded(self) -> bool:
        return self.validation.is_valid and self.reservation is not None


# --- Mapping ------------------------------------------------------------------


def balance_to_dto(balance: StockBalance) -> BalanceDTO:
    return BalanceDTO(
        product_id=balance.product_id,
        warehouse_id=balance.warehouse_id,
        location=balance.location_id or "*",
        available=balance.available_quantity,
        reserved=balance.reserved_quantity,
        total=balance.total_quantity,
        last_updated=balance.last_updated.strftime(_DATE_FORMAT),
        last_updated_by=balance.last_updated_by,
    )


def entry_to_dto(entry: LedgerEntry) -> LedgerEntryDTO:
    reference = ":".join(p for p in (entry.reference_type, entry.reference_id) if p)
    return LedgerEntryDTO(
        id=entry.id,
        date=entry.transaction_date.strftime(_DATE_FORMAT),
        transaction_type=entry.transaction_type.value,
        product_id=entry.product_id,
        location=f"{entry.warehouse_id}/{entry.location_id or DEFAULT_LOCATION}",
        quantity=entry.quantity,
        previous_balance=entry.previous_balance,
        new_balance=entry.new_balance,
        performed_by=entry.performed_by,
        reference=reference,
        total_cost=str(entry.total_cost) if entry.total_cost else "",
    )


def reservation_to_dto(reservation: StockReservation) -> ReservationDTO:
    return ReservationDTO(
        id=reservation.id,
        product_id=reservation.product_id,
        location=str(reservation.location),
        quantity=reservation.quantity,
        status=reservation.status.value,
        reserved_by=reservation.reserved_by,
        reserved_at=reservation.reserved_at.strftime(_DATE_FORMAT),
        expires_at=(
            reservation.expires_at.strftime(_DATE_FORMAT) if reservation.expires_at else ""
        ),
    )
