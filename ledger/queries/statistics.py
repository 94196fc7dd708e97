"""
Derived Statistics

DESIGN DECISION: Statistics are DERIVED, never stored.
Every figure here is recomputed from the transaction log and the
patrimony entities of one snapshot. Nothing is cached or persisted, so
a report can never disagree with the ledger it was built from.

WHAT COUNTS AS INCOME OR EXPENSE:
- Only free-standing transactions (linkage `none`)
- Transfers move money between the user's own methods: excluded
- Savings, debts, loans and their payments are patrimony movements: excluded
- Gifts never moved money: excluded

Archived movements are excluded as well; they are historical patrimony
movements whose entity no longer exists.
"""

import datetime as dt
from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from ledger.models.ledger import (
    CASH_METHOD_COLOR,
    CASH_METHOD_ID,
    CASH_METHOD_NAME,
    Asset,
    BankAccount,
    FixedExpense,
    ProfileData,
    Transaction,
    TransactionType,
)
from ledger.models.reports import (
    ZERO,
    FixedExpenseReport,
    FixedExpenseStatus,
    LedgerOverview,
    NetWorthSummary,
    PaymentMethodInfo,
    PeriodSummary,
    SavingsSource,
)
from ledger.validation.balances import compute_balances, total_balance


def is_countable(transaction: Transaction) -> bool:
    """True if the transaction is real income or expense for statistics."""
    return transaction.is_free_standing and not transaction.is_gift


def _in_month(day: dt.date, today: dt.date) -> bool:
    return day.year == today.year and day.month == today.month


def _summarize(transactions: Iterable[Transaction]) -> PeriodSummary:
    totals = {
        "income_bank": ZERO,
        "income_cash": ZERO,
        "expenses_bank": ZERO,
        "expenses_cash": ZERO,
    }
    for t in transactions:
        if not is_countable(t):
            continue
        side = "income" if t.type == TransactionType.INCOME else "expenses"
        channel = "cash" if t.payment_method_id == CASH_METHOD_ID else "bank"
        totals[f"{side}_{channel}"] += t.amount

    return PeriodSummary(
        income=totals["income_bank"] + totals["income_cash"],
        expenses=totals["expenses_bank"] + totals["expenses_cash"],
        **totals,
    )


def monthly_summary(
    transactions: Iterable[Transaction],
    today: Optional[dt.date] = None,
) -> PeriodSummary:
    """Income/expense totals for the calendar month containing `today`."""
    today = today or dt.date.today()
    return _summarize(t for t in transactions if _in_month(t.date, today))


def total_summary(transactions: Iterable[Transaction]) -> PeriodSummary:
    """All-time income/expense totals."""
    return _summarize(transactions)


# =============================================================================
# FIXED EXPENSES
# =============================================================================

def paid_fixed_expense_names(
    transactions: Iterable[Transaction],
    today: Optional[dt.date] = None,
) -> set[str]:
    """
    Descriptions of this month's expenses.

    A fixed expense counts as paid when one of these equals its name
    exactly. Gifts are included; that is how they mark a bill as paid.
    """
    today = today or dt.date.today()
    return {
        t.description
        for t in transactions
        if t.type == TransactionType.EXPENSE and _in_month(t.date, today)
    }


def fixed_expense_status(
    fixed_expenses: Iterable[FixedExpense],
    transactions: Iterable[Transaction],
    today: Optional[dt.date] = None,
) -> FixedExpenseReport:
    """Paid/unpaid status of every fixed expense; unpaid first, then by name."""
    paid_names = paid_fixed_expense_names(transactions, today)
    items = [
        FixedExpenseStatus(
            expense_id=f.id,
            name=f.name,
            amount=f.amount,
            is_paid=f.name in paid_names,
        )
        for f in fixed_expenses
    ]
    items.sort(key=lambda s: (s.is_paid, s.name.lower()))
    return FixedExpenseReport(
        items=items,
        total=sum((s.amount for s in items), ZERO),
        paid=sum((s.amount for s in items if s.is_paid), ZERO),
    )


# =============================================================================
# PAYMENT METHODS AND SAVINGS
# =============================================================================

def payment_method_directory(bank_accounts: Iterable[BankAccount]) -> dict[str, PaymentMethodInfo]:
    """Display name and colour for cash and every bank account."""
    directory = {
        CASH_METHOD_ID: PaymentMethodInfo(
            method_id=CASH_METHOD_ID,
            name=CASH_METHOD_NAME,
            color=CASH_METHOD_COLOR,
        )
    }
    for account in bank_accounts:
        directory[account.id] = PaymentMethodInfo(
            method_id=account.id,
            name=account.name,
            color=account.color,
        )
    return directory


def savings_by_source(
    assets: Iterable[Asset],
    bank_accounts: Iterable[BankAccount],
) -> list[SavingsSource]:
    """
    Current savings grouped by the payment method they were taken from.

    Sources that no longer exist keep their id as the display name.
    """
    directory = payment_method_directory(bank_accounts)
    totals: dict[str, Decimal] = {}
    for asset in assets:
        totals[asset.source_method_id] = totals.get(asset.source_method_id, ZERO) + asset.value

    sources = []
    for method_id, total in totals.items():
        info = directory.get(method_id)
        sources.append(SavingsSource(
            method_id=method_id,
            name=info.name if info else method_id,
            color=info.color if info else "#9ca3af",
            total=total,
        ))
    sources.sort(key=lambda s: s.total, reverse=True)
    return sources


def net_worth_summary(data: ProfileData) -> NetWorthSummary:
    balances = compute_balances(data.transactions, data.bank_accounts)
    return NetWorthSummary(
        liquid=total_balance(balances),
        savings=sum((a.value for a in data.assets), ZERO),
        loans_receivable=sum((loan.amount for loan in data.loans), ZERO),
        liabilities=sum((debt.amount for debt in data.liabilities), ZERO),
    )


def build_overview(data: ProfileData, today: Optional[dt.date] = None) -> LedgerOverview:
    """
    Compute every derived figure of a profile in one call.

    Args:
        data: Profile snapshot.
        today: Reference day for "this month"; defaults to the local date.
    """
    today = today or dt.date.today()
    balances = compute_balances(data.transactions, data.bank_accounts)
    return LedgerOverview(
        balances=balances,
        total_balance=total_balance(balances),
        month=monthly_summary(data.transactions, today),
        all_time=total_summary(data.transactions),
        fixed_expenses=fixed_expense_status(data.fixed_expenses, data.transactions, today),
        savings_by_source=savings_by_source(data.assets, data.bank_accounts),
        net_worth=net_worth_summary(data),
    )
