"""JSON-file-backed implementation of StockRepository.

The three collections live in one document so that a commit touching
several of them is a single file replacement::

    {"ledger_entries": [...], "stock_balances": [...], "stock_reservations": [...]}
"""

from __future__ import annotations

import json
import os
import threading
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from stockledger.domain.exceptions import StockSystemError
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.ledger_entry import LedgerEntry, TransactionType
from stockledger.domain.model.reservation import ReservationStatus, StockReservation
from stockledger.domain.model.value_objects import Money, StockLocation
from stockledger.domain.repository.stock_repository import StockRepository

_COLLECTIONS = ("ledger_entries", "stock_balances", "stock_reservations")


class JsonStockRepository(StockRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- StockRepository interface --------------------------------------------

    def load_entries(self) -> list[LedgerEntry]:
        return [self._entry_to_domain(raw) for raw in self._load_raw()["ledger_entries"]]

    def load_balances(self) -> list[StockBalance]:
        return [self._balance_to_domain(raw) for raw in self._load_raw()["stock_balances"]]

    def load_reservations(self) -> list[StockReservation]:
        return [
            self._reservation_to_domain(raw)
            for raw in self._load_raw()["stock_reservations"]
        ]

    def commit(
        self,
        entries: Sequence[LedgerEntry] = (),
        balances: Sequence[StockBalance] = (),
        reservations: Sequence[StockReservation] = (),
    ) -> None:
        with self._lock:
            document = self._load_raw()
            document["ledger_entries"].extend(self._entry_to_raw(e) for e in entries)

            # Upsert: replace if exists, otherwise append
            balance_index = {
                self._balance_id(raw): i for i, raw in enumerate(document["stock_balances"])
            }
            for balance in balances:
                raw = self._balance_to_raw(balance)
                position = balance_index.get(self._balance_id(raw))
                if position is None:
                    document["stock_balances"].append(raw)
                else:
                    document["stock_balances"][position] = raw

            reservation_index = {
                raw["id"]: i for i, raw in enumerate(document["stock_reservations"])
            }
            for reservation in reservations:
                raw = self._reservation_to_raw(reservation)
                position = reservation_index.get(reservation.id)
                if position is None:
                    document["stock_reservations"].append(raw)
                else:
                    document["stock_reservations"][position] = raw

            self._persist_raw(document)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _money_to_raw(money: Money | None) -> dict | None:
        if money is None:
            return None
        return {"amount": str(money.amount), "currency": money.currency}

    @staticmethod
    def _money_to_domain(raw: dict | None) -> Money | None:
        if raw is None:
            return None
        return Money(Decimal(raw["amount"]), raw.get("currency", "USD"))

    @classmethod
    def _entry_to_raw(cls, entry: LedgerEntry) -> dict:
        return {
            "id": entry.id,
            "product_id": entry.product_id,
            "warehouse_id": entry.warehouse_id,
            "location_id": entry.location_id,
            "transaction_type": entry.transaction_type.value,
            "quantity": entry.quantity,
            "previous_balance": entry.previous_balance,
            "new_balance": entry.new_balance,
            "performed_by": entry.performed_by,
            "transaction_date": entry.transaction_date.isoformat(),
            "reference_type": entry.reference_type,
            "reference_id": entry.reference_id,
            "unit_cost": cls._money_to_raw(entry.unit_cost),
            "total_cost": cls._money_to_raw(entry.total_cost),
            "notes": entry.notes,
        }

    @classmethod
    def _entry_to_domain(cls, raw: dict) -> LedgerEntry:
        return LedgerEntry(
            id=raw["id"],
            product_id=raw["product_id"],
            warehouse_id=raw["warehouse_id"],
            location_id=raw.get("location_id"),
            transaction_type=TransactionType(raw["transaction_type"]),
            quantity=raw["quantity"],
            previous_balance=raw["previous_balance"],
            new_balance=raw["new_balance"],
            performed_by=raw["performed_by"],
            transaction_date=datetime.fromisoformat(raw["transaction_date"]),
            reference_type=raw.get("reference_type"),
            reference_id=raw.get("reference_id"),
            unit_cost=cls._money_to_domain(raw.get("unit_cost")),
            total_cost=cls._money_to_domain(raw.get("total_cost")),
            notes=raw.get("notes"),
        )

    @staticmethod
    def _balance_id(raw: dict) -> tuple[str, str, str | None]:
        return raw["product_id"], raw["warehouse_id"], raw.get("location_id")

    @staticmethod
    def _balance_to_raw(balance: StockBalance) -> dict:
        return {
            "product_id": balance.product_id,
            "warehouse_id": balance.warehouse_id,
            "location_id": balance.location_id,
            "available_quantity": balance.available_quantity,
            "reserved_quantity": balance.reserved_quantity,
            "total_quantity": balance.total_quantity,
            "last_updated": balance.last_updated.isoformat(),
            "last_updated_by": balance.last_updated_by,
        }

    @staticmethod
    def _balance_to_domain(raw: dict) -> StockBalance:
        return StockBalance(
            product_id=raw["product_id"],
            warehouse_id=raw["warehouse_id"],
            location_id=raw.get("location_id"),
            available_quantity=raw["available_quantity"],
            reserved_quantity=raw.get("reserved_quantity", 0),
            total_quantity=raw["total_quantity"],
            last_updated=datetime.fromisoformat(raw["last_updated"]),
            last_updated_by=raw.get("last_updated_by", ""),
        )

    @staticmethod
    def _reservation_to_raw(reservation: StockReservation) -> dict:
        return {
            "id": reservation.id,
            "product_id": reservation.product_id,
            "warehouse_id": reservation.location.warehouse_id,
            "location_id": reservation.location.location_id,
            "quantity": reservation.quantity,
            "reserved_by": reservation.reserved_by,
            "reserved_at": reservation.reserved_at.isoformat(),
            "expires_at": reservation.expires_at.isoformat() if reservation.expires_at else None,
            "status": reservation.status.value,
            "closed_at": reservation.closed_at.isoformat() if reservation.closed_at else None,
            "closed_by": reservation.closed_by,
        }

    @staticmethod
    def _reservation_to_domain(raw: dict) -> StockReservation:
        def when(value: str | None) -> datetime | None:
            return datetime.fromisoformat(value) if value else None

        return StockReservation(
            id=raw["id"],
            product_id=raw["product_id"],
            location=StockLocation(raw["warehouse_id"], raw.get("location_id")),
            quantity=raw["quantity"],
            reserved_by=raw["reserved_by"],
            reserved_at=datetime.fromisoformat(raw["reserved_at"]),
            expires_at=when(raw.get("expires_at")),
            status=ReservationStatus(raw["status"]),
            closed_at=when(raw.get("closed_at")),
            closed_by=raw.get("closed_by"),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, list[dict]]:
        try:
            document = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StockSystemError(f"Cannot read {self._file_path}: {exc}") from exc
        for name in _COLLECTIONS:
            document.setdefault(name, [])
        return document

    def _persist_raw(self, document: dict[str, list[dict]]) -> None:
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp_path, self._file_path)
        except OSError as exc:
            raise StockSystemError(f"Cannot write {self._file_path}: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist_raw({name: [] for name in _COLLECTIONS})
