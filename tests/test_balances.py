"""Tests for balance calculation and the balance validator."""

import datetime as dt
from decimal import Decimal

import pytest

from ledger.errors import InsufficientFundsError, InvalidInputError
from ledger.models import CASH_METHOD_ID, BankAccount, ProfileData, Transaction, TransactionType
from ledger.validation import (
    BalanceValidator,
    compute_balances,
    ensure_valid_balances,
    require_date,
    require_known_method,
    require_non_negative_amount,
    require_positive_amount,
    require_text,
    total_balance,
    validate_transaction_change,
)


BANK = BankAccount(id="bank-1", name="Banco")


def _tx(amount, type_, method=CASH_METHOD_ID, day=1, **extra) -> Transaction:
    return Transaction(
        amount=Decimal(amount),
        date=dt.date(2024, 1, day),
        type=type_,
        payment_method_id=method,
        **extra,
    )


class TestComputeBalances:
    """Tests for compute_balances."""

    def test_every_method_starts_at_zero(self):
        """Test that cash and every bank account appear with no movements."""
        balances = compute_balances([], [BANK])
        assert balances == {CASH_METHOD_ID: Decimal("0"), "bank-1": Decimal("0")}

    def test_income_adds_and_expense_subtracts(self):
        """Test the signed fold per payment method."""
        balances = compute_balances(
            [
                _tx("100", TransactionType.INCOME),
                _tx("30", TransactionType.EXPENSE, day=2),
                _tx("50", TransactionType.INCOME, method="bank-1"),
            ],
            [BANK],
        )
        assert balances[CASH_METHOD_ID] == Decimal("70")
        assert balances["bank-1"] == Decimal("50")
        assert total_balance(balances) == Decimal("120")

    def test_gifts_do_not_move_money(self):
        """Test that gift transactions are skipped."""
        balances = compute_balances(
            [_tx("80", TransactionType.EXPENSE, is_gift=True)],
            [],
        )
        assert balances[CASH_METHOD_ID] == Decimal("0")

    def test_unknown_methods_still_accumulate(self):
        """Test that a deleted account's movements are not dropped."""
        balances = compute_balances([_tx("10", TransactionType.INCOME, method="old")], [])
        assert balances["old"] == Decimal("10")

    def test_order_of_input_does_not_matter(self):
        """Test that newest-first storage order gives the same result."""
        txs = [_tx("5", TransactionType.EXPENSE, day=3), _tx("20", TransactionType.INCOME, day=1)]
        assert compute_balances(txs, []) == compute_balances(list(reversed(txs)), [])


class TestBalanceValidator:
    """Tests for the single balance gate."""

    def test_valid_list_returns_none(self):
        """Test that non-negative balances pass."""
        txs = [_tx("10", TransactionType.INCOME), _tx("10", TransactionType.EXPENSE)]
        assert validate_transaction_change(txs, []) is None

    def test_negative_balance_is_reported_by_name(self):
        """Test that the message names the offending method."""
        message = validate_transaction_change(
            [_tx("10", TransactionType.EXPENSE, method="bank-1")],
            [BANK],
        )
        assert message is not None
        assert "Banco" in message

    def test_rounding_noise_is_tolerated(self):
        """Test that a negative balance within epsilon passes."""
        txs = [
            _tx("1", TransactionType.INCOME),
            _tx("1.0000000001", TransactionType.EXPENSE),
        ]
        assert validate_transaction_change(txs, []) is None

    def test_custom_epsilon(self):
        """Test that the tolerance can be widened."""
        txs = [_tx("1", TransactionType.INCOME), _tx("1.5", TransactionType.EXPENSE)]
        assert BalanceValidator(Decimal("1")).find_violation(txs, []) is None
        assert BalanceValidator(Decimal("0")).find_violation(txs, []) is not None

    def test_ensure_valid_balances_raises(self):
        """Test that the raising variant uses InsufficientFundsError."""
        with pytest.raises(InsufficientFundsError, match="Efectivo"):
            ensure_valid_balances([_tx("1", TransactionType.EXPENSE)], [])


class TestInputGuards:
    """Tests for parameter guards."""

    @pytest.mark.parametrize("value", [None, "0", "-3", "abc", "NaN"])
    def test_require_positive_amount_rejects(self, value):
        """Test rejection of missing, zero, negative and non-numeric amounts."""
        with pytest.raises(InvalidInputError):
            require_positive_amount(value)

    def test_require_positive_amount_parses(self):
        """Test that strings and numbers are turned into Decimal."""
        assert require_positive_amount("12.50") == Decimal("12.50")
        assert require_positive_amount(3) == Decimal("3")

    def test_require_non_negative_amount_allows_zero(self):
        """Test that zero is accepted where allowed."""
        assert require_non_negative_amount("0") == Decimal("0")
        with pytest.raises(InvalidInputError):
            require_non_negative_amount("-0.01")

    def test_require_text(self):
        """Test blank descriptions are refused and others stripped."""
        assert require_text("  Pan ") == "Pan"
        with pytest.raises(InvalidInputError, match="Description"):
            require_text("   ")

    def test_require_date(self):
        """Test the accepted date forms."""
        assert require_date("2024-03-05") == dt.date(2024, 3, 5)
        assert require_date(dt.datetime(2024, 3, 5, 10, 0)) == dt.date(2024, 3, 5)
        with pytest.raises(InvalidInputError):
            require_date("05/03/2024")
        with pytest.raises(InvalidInputError):
            require_date(None)

    def test_require_known_method(self):
        """Test that only cash and existing accounts are accepted."""
        data = ProfileData(bank_accounts=[BANK])
        assert require_known_method(data, "bank-1") == "bank-1"
        assert require_known_method(data, CASH_METHOD_ID) == CASH_METHOD_ID
        with pytest.raises(InvalidInputError):
            require_known_method(data, "bank-2")
        with pytest.raises(InvalidInputError):
            require_known_method(data, None)
