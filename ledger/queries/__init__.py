"""Derived statistics package."""

from ledger.queries.statistics import (
    build_overview,
    fixed_expense_status,
    is_countable,
    monthly_summary,
    net_worth_summary,
    paid_fixed_expense_names,
    payment_method_directory,
    savings_by_source,
    total_summary,
)

__all__ = [
    "build_overview",
    "fixed_expense_status",
    "is_countable",
    "monthly_summary",
    "net_worth_summary",
    "paid_fixed_expense_names",
    "payment_method_directory",
    "savings_by_source",
    "total_summary",
]
