"""Unit tests for transaction types and their balance arithmetic."""

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.ledger_entry import TransactionType


class TestParse:

    def test_parses_wire_values(self):
        assert TransactionType.parse("transfer_in") is TransactionType.TRANSFER_IN
        assert TransactionType.parse(TransactionType.COUNT) is TransactionType.COUNT

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError, match="Unknown transaction type"):
            TransactionType.parse("teleport")


class TestApply:

    @pytest.mark.parametrize(
        "txn_type, previous, quantity, expected",
        [
            (TransactionType.IN, 10, 5, 15),
            (TransactionType.TRANSFER_IN, 10, 5, 15),
            (TransactionType.OUT, 10, 4, 6),
            (TransactionType.TRANSFER_OUT, 10, 4, 6),
            (TransactionType.ADJUSTMENT, 10, -3, 7),
            (TransactionType.ADJUSTMENT, 10, 3, 13),
            (TransactionType.COUNT, 70, 50, 50),
            (TransactionType.COUNT, 0, 12, 12),
        ],
    )
    def test_new_balance(self, txn_type, previous, quantity, expected):
        assert txn_type.apply(previous, quantity) == expected


class TestCheckQuantity:

    @pytest.mark.parametrize(
        "txn_type",
        [TransactionType.IN, TransactionType.OUT, TransactionType.TRANSFER_IN, TransactionType.TRANSFER_OUT],
    )
    def test_directional_types_need_positive(self, txn_type):
        assert txn_type.check_quantity(3) == 3
        with pytest.raises(ValidationError, match="greater than 0"):
            txn_type.check_quantity(-3)

    def test_adjustment_accepts_signed_delta(self):
        assert TransactionType.ADJUSTMENT.check_quantity(-4) == -4

    def test_zero_adjustment_rejected(self):
        with pytest.raises(ValidationError, match="non-zero"):
            TransactionType.ADJUSTMENT.check_quantity(0)

    def test_count_accepts_zero(self):
        assert TransactionType.COUNT.check_quantity(0) == 0

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            TransactionType.COUNT.check_quantity(-1)

    @pytest.mark.parametrize("value", ["10", 2.5, None, False])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(ValidationError, match="must be an integer"):
            TransactionType.ADJUSTMENT.check_quantity(value)
