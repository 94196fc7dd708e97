"""Balance calculation and validation."""

from ledger.validation.balances import compute_balances, total_balance
from ledger.validation.validator import (
    BalanceValidator,
    ensure_valid_balances,
    invalid_input_from,
    require_date,
    require_known_method,
    require_non_negative_amount,
    require_positive_amount,
    require_text,
    validate_transaction_change,
)

__all__ = [
    "BalanceValidator",
    "compute_balances",
    "ensure_valid_balances",
    "invalid_input_from",
    "require_date",
    "require_known_method",
    "require_non_negative_amount",
    "require_positive_amount",
    "require_text",
    "total_balance",
    "validate_transaction_change",
]
