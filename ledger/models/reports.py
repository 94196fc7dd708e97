"""
Report and Result Models

Read-only views computed from a ProfileData snapshot, plus the result
envelope the store hands back for every mutation.

These are never persisted.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ledger.models.ledger import ProfileData


ZERO = Decimal("0")


class PeriodSummary(BaseModel):
    """Income/expense totals for a period, split by cash vs bank."""

    income: Decimal = ZERO
    expenses: Decimal = ZERO
    income_bank: Decimal = ZERO
    income_cash: Decimal = ZERO
    expenses_bank: Decimal = ZERO
    expenses_cash: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        """Income minus expenses."""
        return self.income - self.expenses


class FixedExpenseStatus(BaseModel):
    """Whether a fixed expense has been paid this month."""

    expense_id: str
    name: str
    amount: Decimal
    is_paid: bool


class FixedExpenseReport(BaseModel):
    """Paid/unpaid breakdown of the fixed expenses for the current month."""

    items: list[FixedExpenseStatus] = Field(default_factory=list)
    total: Decimal = ZERO
    paid: Decimal = ZERO

    @property
    def remaining(self) -> Decimal:
        return self.total - self.paid


class PaymentMethodInfo(BaseModel):
    """Display data for a payment method."""

    method_id: str
    name: str
    color: str


class SavingsSource(BaseModel):
    """Current savings grouped by the payment method they came from."""

    method_id: str
    name: str
    color: str
    total: Decimal


class NetWorthSummary(BaseModel):
    """
    Net worth figures.

    Attributes:
        liquid: Sum of payment method balances.
        savings: Current value of all assets.
        loans_receivable: Outstanding amount lent out.
        liabilities: Outstanding debt.
    """

    liquid: Decimal
    savings: Decimal
    loans_receivable: Decimal
    liabilities: Decimal

    @property
    def net_worth(self) -> Decimal:
        return self.liquid + self.savings + self.loans_receivable - self.liabilities


class LedgerOverview(BaseModel):
    """Everything a dashboard needs, computed in one pass."""

    as_of: datetime = Field(default_factory=datetime.utcnow)
    balances: dict[str, Decimal] = Field(default_factory=dict)
    total_balance: Decimal = ZERO
    month: PeriodSummary = Field(default_factory=PeriodSummary)
    all_time: PeriodSummary = Field(default_factory=PeriodSummary)
    fixed_expenses: FixedExpenseReport = Field(default_factory=FixedExpenseReport)
    savings_by_source: list[SavingsSource] = Field(default_factory=list)
    net_worth: NetWorthSummary


class OperationResult(BaseModel):
    """
    Result of applying one mutation through the store.

    On failure `data` is the untouched snapshot and `error_message`
    explains why.
    """

    operation: str = Field(
        ...,
        description="Name of the engine operation that was applied"
    )
    executed_at: datetime = Field(
        default_factory=datetime.utcnow
    )

    success: bool
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    data: Optional[ProfileData] = Field(
        default=None,
        description="Snapshot installed after the operation (or the unchanged one)"
    )
