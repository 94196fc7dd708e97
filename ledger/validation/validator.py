"""
Transaction Validation

DESIGN DECISION: Validation happens in two distinct places:

INPUT GUARDS (before anything is built):
- Required fields present
- Amounts parse and have the right sign
- Referenced payment methods exist
- These produce InvalidInputError

BALANCE FEASIBILITY (after the candidate snapshot is built):
- Recompute every payment method balance on the prospective
  transaction list
- Refuse if any balance ends below zero (beyond a rounding tolerance)
- This is the single gate every balance-affecting mutation passes

WHY TWO STAGES:
1. Input errors are reported before any work is done
2. Balance checks see the full effect of cascades, not one transaction
3. A failed check leaves the previous snapshot completely untouched

IMPORTANT: Validation NEVER silently fixes issues.
"""

import datetime as dt
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import ValidationError

from ledger.config import get_settings
from ledger.errors import InsufficientFundsError, InvalidInputError
from ledger.models.ledger import (
    CASH_METHOD_ID,
    CASH_METHOD_NAME,
    BankAccount,
    ProfileData,
    Transaction,
)
from ledger.validation.balances import compute_balances


class BalanceValidator:
    """
    Checks that a prospective transaction list keeps every payment
    method at or above zero.
    """

    def __init__(self, epsilon: Optional[Decimal] = None):
        """
        Initialize validator.

        Args:
            epsilon: Tolerance for negative balances.
                     If None, the configured balance_epsilon is used.
        """
        if epsilon is None:
            epsilon = get_settings().ledger.balance_epsilon
        self._epsilon = Decimal(epsilon)

    def find_violation(
        self,
        transactions: Iterable[Transaction],
        bank_accounts: Iterable[BankAccount],
    ) -> Optional[str]:
        """
        Return a message describing the first negative balance, or None.
        """
        bank_accounts = list(bank_accounts)
        balances = compute_balances(transactions, bank_accounts)
        names = {account.id: account.name for account in bank_accounts}
        names[CASH_METHOD_ID] = CASH_METHOD_NAME

        for method_id, balance in balances.items():
            if balance < -self._epsilon:
                name = names.get(method_id, method_id)
                return (
                    f"Insufficient funds in {name}: "
                    f"the balance would become {balance:,.2f}"
                )
        return None


def validate_transaction_change(
    transactions: Iterable[Transaction],
    bank_accounts: Iterable[BankAccount],
    epsilon: Optional[Decimal] = None,
) -> Optional[str]:
    """
    Validate a prospective transaction list.

    Returns:
        A human-readable error message, or None if every balance is valid.
    """
    return BalanceValidator(epsilon).find_violation(transactions, bank_accounts)


def ensure_valid_balances(
    transactions: Iterable[Transaction],
    bank_accounts: Iterable[BankAccount],
    error_cls: type[InsufficientFundsError] = InsufficientFundsError,
) -> None:
    """Raise `error_cls` if the prospective transaction list is invalid."""
    message = validate_transaction_change(transactions, bank_accounts)
    if message is not None:
        raise error_cls(message)


# =============================================================================
# INPUT GUARDS
# =============================================================================

def _to_decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidInputError(f"{field} must be a number")
    if not amount.is_finite():
        raise InvalidInputError(f"{field} must be a number")
    return amount


def require_positive_amount(value: Any, field: str = "Amount") -> Decimal:
    """Parse an amount that must be greater than zero."""
    if value is None:
        raise InvalidInputError(f"{field} is required")
    amount = _to_decimal(value, field)
    if amount <= 0:
        raise InvalidInputError(f"{field} must be greater than zero")
    return amount


def require_non_negative_amount(value: Any, field: str = "Amount") -> Decimal:
    """Parse an amount that may be zero but not negative."""
    if value is None:
        raise InvalidInputError(f"{field} is required")
    amount = _to_decimal(value, field)
    if amount < 0:
        raise InvalidInputError(f"{field} cannot be negative")
    return amount


def require_text(value: Optional[str], field: str = "Description") -> str:
    """Require a non-blank string and return it stripped."""
    if value is None or not value.strip():
        raise InvalidInputError(f"{field} is required")
    return value.strip()


def require_date(value: Any, field: str = "Date") -> dt.date:
    """Accept a date, datetime or ISO 'YYYY-MM-DD' string."""
    if value is None or value == "":
        raise InvalidInputError(f"{field} is required")
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise InvalidInputError(f"{field} must be a valid YYYY-MM-DD date")


def require_known_method(data: ProfileData, method_id: Optional[str]) -> str:
    """Require a payment method id that is cash or an existing bank account."""
    if not method_id:
        raise InvalidInputError("A payment method must be selected")
    if not data.is_known_method(method_id):
        raise InvalidInputError(f"Unknown payment method: {method_id}")
    return method_id


def invalid_input_from(error: ValidationError) -> InvalidInputError:
    """
    Translate a model validation failure into an input error.

    Field limits (text lengths, non-negative amounts) are enforced by the
    models themselves; this reports the first violated one.
    """
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "value"
    return InvalidInputError(f"Invalid {field}: {first['msg']}")
