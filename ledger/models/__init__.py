"""
Data Models Package

This package contains all Pydantic models used by the ledger.
All data flowing through the engine must conform to these schemas.
"""

from ledger.models.ledger import (
    CASH_METHOD_COLOR,
    CASH_METHOD_ID,
    CASH_METHOD_NAME,
    DEFAULT_CATEGORIES,
    DESCRIPTION_MAX_LENGTH,
    ArchivedLink,
    Asset,
    BankAccount,
    Category,
    DebtPaymentLink,
    DebtRecord,
    FixedExpense,
    InitialAddition,
    LedgerSnapshot,
    Liability,
    Linkage,
    Loan,
    LoanRepaymentLink,
    NoLinkage,
    PatrimonyAdditionLink,
    PatrimonyCreationLink,
    PatrimonyType,
    Profile,
    ProfileData,
    QuickExpense,
    SavingsSpendLink,
    Transaction,
    TransactionType,
    TransferLink,
    evolve,
    new_id,
)
from ledger.models.reports import (
    FixedExpenseReport,
    FixedExpenseStatus,
    LedgerOverview,
    NetWorthSummary,
    OperationResult,
    PaymentMethodInfo,
    PeriodSummary,
    SavingsSource,
)
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CASH_METHOD_COLOR",
    "CASH_METHOD_ID",
    "CASH_METHOD_NAME",
    "DEFAULT_CATEGORIES",
    "DESCRIPTION_MAX_LENGTH",
    "ArchivedLink",
    "Asset",
    "BankAccount",
    "Category",
    "DebtPaymentLink",
    "DebtRecord",
    "FixedExpense",
    "InitialAddition",
    "LedgerSnapshot",
    "Liability",
    "Linkage",
    "Loan",
    "LoanRepaymentLink",
    "NoLinkage",
    "PatrimonyAdditionLink",
    "PatrimonyCreationLink",
    "PatrimonyType",
    "Profile",
    "ProfileData",
    "QuickExpense",
    "SavingsSpendLink",
    "Transaction",
    "TransactionType",
    "TransferLink",
    "evolve",
    "new_id",
    # Report models
    "FixedExpenseReport",
    "FixedExpenseStatus",
    "LedgerOverview",
    "NetWorthSummary",
    "OperationResult",
    "PaymentMethodInfo",
    "PeriodSummary",
    "SavingsSource",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
