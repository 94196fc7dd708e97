"""Ledger mutation engine: pure (data, params) -> data operations."""

from ledger.engine.patrimony import (
    PaymentEntry,
    add_value_to_liability,
    add_value_to_loan,
    create_saving,
    delete_asset,
    delete_liability,
    delete_loan,
    pay_debts,
    receive_loan_payments,
    save_liability,
    save_loan,
    spend_from_savings,
    update_addition,
    update_liability,
    update_loan,
)
from ledger.engine.registry import (
    add_bank_account,
    add_category,
    add_fixed_expense,
    add_quick_expense,
    create_profile,
    delete_bank_account,
    delete_category,
    delete_fixed_expense,
    delete_quick_expense,
    reorder_categories,
    update_bank_account,
    update_category,
    update_fixed_expense,
    update_quick_expense,
)
from ledger.engine.transactions import (
    add_transaction,
    add_transfer,
    delete_transaction,
    deletion_confirmation_message,
    gift_fixed_expense,
    update_transaction,
)

__all__ = [
    # Transactions
    "add_transaction",
    "add_transfer",
    "delete_transaction",
    "deletion_confirmation_message",
    "gift_fixed_expense",
    "update_transaction",
    # Patrimony
    "PaymentEntry",
    "add_value_to_liability",
    "add_value_to_loan",
    "create_saving",
    "delete_asset",
    "delete_liability",
    "delete_loan",
    "pay_debts",
    "receive_loan_payments",
    "save_liability",
    "save_loan",
    "spend_from_savings",
    "update_addition",
    "update_liability",
    "update_loan",
    # Registry
    "add_bank_account",
    "add_category",
    "add_fixed_expense",
    "add_quick_expense",
    "create_profile",
    "delete_bank_account",
    "delete_category",
    "delete_fixed_expense",
    "delete_quick_expense",
    "reorder_categories",
    "update_bank_account",
    "update_category",
    "update_fixed_expense",
    "update_quick_expense",
]
