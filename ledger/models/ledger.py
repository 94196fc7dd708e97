"""
Core Ledger Models

These models define the strict schemas for every entity a profile owns.
They are designed to:
1. Be immutable - the engine never edits a snapshot, it builds a new one
2. Round-trip losslessly through JSON (camelCase keys, as persisted)
3. Make the reason a transaction exists explicit (see Linkage)

DESIGN DECISION: Money is Decimal, days are plain calendar dates.
Floating point sums drift; calendar days do not need time zones.

DESIGN DECISION: A transaction carries exactly one Linkage. The linkage
is a tagged variant (pydantic discriminated union on `kind`) instead of a
bag of optional ids, so deletion and editing can dispatch on it
exhaustively.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


CASH_METHOD_ID = "efectivo"
CASH_METHOD_NAME = "Efectivo"
CASH_METHOD_COLOR = "#22c55e"
DESCRIPTION_MAX_LENGTH = 200


def new_id() -> str:
    """Generate a fresh entity id."""
    return str(uuid4())


class LedgerModel(BaseModel):
    """Base for all persisted ledger entities."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def evolve(model: LedgerModel, **changes: Any) -> LedgerModel:
    """
    Return a copy of `model` with `changes` applied, re-running validation.

    model_copy(update=...) skips validators; entity invariants
    (e.g. amount <= original_amount) must hold on every copy we commit.
    """
    values = model.model_dump()
    values.update(changes)
    return type(model).model_validate(values)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction relative to its payment method."""
    INCOME = "income"
    EXPENSE = "expense"


class PatrimonyType(str, Enum):
    """
    Patrimony movement kinds.

    The first three create an entity; the additions increase one;
    asset-spend withdraws from savings.
    """
    ASSET = "asset"
    LIABILITY = "liability"
    LOAN = "loan"
    LOAN_ADDITION = "loan-addition"
    DEBT_ADDITION = "debt-addition"
    ASSET_SPEND = "asset-spend"

    @property
    def entity_kind(self) -> "PatrimonyType":
        """The entity collection this movement targets."""
        if self is PatrimonyType.LOAN_ADDITION:
            return PatrimonyType.LOAN
        if self is PatrimonyType.DEBT_ADDITION:
            return PatrimonyType.LIABILITY
        if self is PatrimonyType.ASSET_SPEND:
            return PatrimonyType.ASSET
        return self


CREATION_TYPES = frozenset({PatrimonyType.ASSET, PatrimonyType.LIABILITY, PatrimonyType.LOAN})
ADDITION_TYPES = frozenset({PatrimonyType.LOAN_ADDITION, PatrimonyType.DEBT_ADDITION})


# =============================================================================
# LINKAGE - why a transaction exists
# =============================================================================

class NoLinkage(LedgerModel):
    """Free-standing income or expense."""
    kind: Literal["none"] = "none"


class TransferLink(LedgerModel):
    """One leg of a transfer between two payment methods."""
    kind: Literal["transfer"] = "transfer"
    transfer_id: str


class PatrimonyCreationLink(LedgerModel):
    """Created an asset, liability or loan."""
    kind: Literal["patrimony_creation"] = "patrimony_creation"
    patrimony_type: PatrimonyType = Field(..., alias="patrimonioType")
    entity_id: str = Field(..., alias="patrimonioId")

    @model_validator(mode='after')
    def validate_type(self) -> 'PatrimonyCreationLink':
        if self.patrimony_type not in CREATION_TYPES:
            raise ValueError(f"{self.patrimony_type.value} is not a creation movement")
        return self


class PatrimonyAdditionLink(LedgerModel):
    """Increased an existing liability or loan."""
    kind: Literal["patrimony_addition"] = "patrimony_addition"
    patrimony_type: PatrimonyType = Field(..., alias="patrimonioType")
    entity_id: str = Field(..., alias="patrimonioId")

    @model_validator(mode='after')
    def validate_type(self) -> 'PatrimonyAdditionLink':
        if self.patrimony_type not in ADDITION_TYPES:
            raise ValueError(f"{self.patrimony_type.value} is not an addition movement")
        return self


class DebtPaymentLink(LedgerModel):
    """Paid down a liability."""
    kind: Literal["debt_payment"] = "debt_payment"
    liability_id: str


class LoanRepaymentLink(LedgerModel):
    """Repayment received on a loan."""
    kind: Literal["loan_repayment"] = "loan_repayment"
    loan_id: str


class SavingsSpendLink(LedgerModel):
    """
    One leg of a spend from savings.

    Both legs share `spend_id` and the allocation map
    (asset id -> value consumed from that asset).
    """
    kind: Literal["savings_spend"] = "savings_spend"
    spend_id: str
    source_method_id: str
    allocations: dict[str, Decimal] = Field(default_factory=dict)


class ArchivedLink(LedgerModel):
    """Movement of a settled liability or loan that has been archived."""
    kind: Literal["archived"] = "archived"
    former_kind: str
    entity_name: str


Linkage = Annotated[
    Union[
        NoLinkage,
        TransferLink,
        PatrimonyCreationLink,
        PatrimonyAdditionLink,
        DebtPaymentLink,
        LoanRepaymentLink,
        SavingsSpendLink,
        ArchivedLink,
    ],
    Field(discriminator="kind"),
]


def _pop_first(values: dict, *keys: str) -> Any:
    found = None
    for key in keys:
        value = values.pop(key, None)
        if found is None and value not in (None, ""):
            found = value
    return found


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(LedgerModel):
    """The atomic ledger entry."""

    id: str = Field(default_factory=new_id)
    description: str = Field(
        default="",
        max_length=DESCRIPTION_MAX_LENGTH,
        description="What the money was for"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative magnitude; direction comes from `type`"
    )
    date: dt.date
    type: TransactionType
    payment_method_id: str = Field(
        ...,
        min_length=1,
        description="Bank account id or the reserved cash id"
    )
    category_id: Optional[str] = None
    details: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="Free text note"
    )
    is_gift: bool = Field(
        default=False,
        description="Marks a fixed expense paid without moving money"
    )
    linkage: Linkage = Field(default_factory=NoLinkage)

    @model_validator(mode='before')
    @classmethod
    def lift_legacy_linkage(cls, data: Any) -> Any:
        """
        Accept the flat legacy fields (transferId, patrimonioId + patrimonioType,
        liabilityId, loanId) and turn them into a Linkage.
        """
        if not isinstance(data, dict) or "linkage" in data:
            return data

        values = dict(data)
        transfer_id = _pop_first(values, "transferId", "transfer_id")
        patrimony_id = _pop_first(values, "patrimonioId", "patrimonio_id")
        patrimony_type = _pop_first(values, "patrimonioType", "patrimonio_type")
        liability_id = _pop_first(values, "liabilityId", "liability_id")
        loan_id = _pop_first(values, "loanId", "loan_id")

        if transfer_id:
            linkage = {"kind": "transfer", "transfer_id": transfer_id}
        elif patrimony_type == PatrimonyType.ASSET_SPEND.value:
            linkage = {
                "kind": "savings_spend",
                "spend_id": patrimony_id or values.get("id") or new_id(),
                "source_method_id": values.get("paymentMethodId") or values.get("payment_method_id"),
            }
        elif patrimony_type and patrimony_id:
            kind = (
                "patrimony_addition"
                if patrimony_type in {t.value for t in ADDITION_TYPES}
                else "patrimony_creation"
            )
            linkage = {"kind": kind, "patrimonioType": patrimony_type, "patrimonioId": patrimony_id}
        elif liability_id:
            linkage = {"kind": "debt_payment", "liability_id": liability_id}
        elif loan_id:
            linkage = {"kind": "loan_repayment", "loan_id": loan_id}
        else:
            linkage = {"kind": "none"}

        values["linkage"] = linkage
        return values

    @property
    def signed_amount(self) -> Decimal:
        """Amount with income positive and expense negative."""
        return self.amount if self.type == TransactionType.INCOME else -self.amount

    @property
    def is_free_standing(self) -> bool:
        """True for plain income/expense with no structural link."""
        return isinstance(self.linkage, NoLinkage)

    @property
    def is_transfer(self) -> bool:
        return isinstance(self.linkage, TransferLink)


# =============================================================================
# REGISTRY ENTITIES
# =============================================================================

class BankAccount(LedgerModel):
    """A bank account usable as a payment method."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default="#3b82f6", max_length=20)


class Category(LedgerModel):
    """Income/expense category."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(default="🏷️", max_length=50)
    color: Optional[str] = None


class FixedExpense(LedgerModel):
    """
    A recurring bill template.

    Paid status is inferred by name match against this month's expenses.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., ge=0)
    category_id: Optional[str] = None


class QuickExpense(LedgerModel):
    """A one-tap expense template."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., ge=0)
    category_id: Optional[str] = None
    icon: Optional[str] = None


# =============================================================================
# PATRIMONY ENTITIES
# =============================================================================

class Asset(LedgerModel):
    """Money moved out of a payment method into a savings bucket."""

    id: str = Field(default_factory=new_id)
    name: str = Field(default="Ahorro", max_length=200)
    value: Decimal = Field(..., ge=0)
    date: dt.date
    source_method_id: str


class InitialAddition(LedgerModel):
    """An addition recorded without moving any real balance."""

    id: str = Field(default_factory=new_id)
    amount: Decimal = Field(..., ge=0)
    date: dt.date
    details: str = ""


class DebtRecord(LedgerModel):
    """
    Shared shape of liabilities and loans.

    `amount` is the live remaining balance; `original_amount` is everything
    ever issued (original plus additions).
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    details: str = ""
    amount: Decimal = Field(..., ge=0)
    original_amount: Decimal = Field(..., ge=0)
    date: dt.date
    initial_additions: list[InitialAddition] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_amounts(self) -> 'DebtRecord':
        if self.amount > self.original_amount:
            raise ValueError("Remaining amount cannot exceed the original amount")
        return self

    @property
    def paid_amount(self) -> Decimal:
        return self.original_amount - self.amount


class Liability(DebtRecord):
    """A debt the profile owes."""

    destination_method_id: Optional[str] = None


class Loan(DebtRecord):
    """Money the profile lent out."""

    source_method_id: Optional[str] = None


# =============================================================================
# CONTAINERS
# =============================================================================

class ProfileData(LedgerModel):
    """Everything a profile owns. Transactions are stored newest first."""

    transactions: list[Transaction] = Field(default_factory=list)
    bank_accounts: list[BankAccount] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    fixed_expenses: list[FixedExpense] = Field(default_factory=list)
    quick_expenses: list[QuickExpense] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)
    liabilities: list[Liability] = Field(default_factory=list)
    loans: list[Loan] = Field(default_factory=list)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def get_bank_account(self, account_id: str) -> Optional[BankAccount]:
        return next((b for b in self.bank_accounts if b.id == account_id), None)

    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def find_category_by_name(self, name: str) -> Optional[Category]:
        wanted = name.strip().lower()
        return next((c for c in self.categories if c.name.strip().lower() == wanted), None)

    def is_known_method(self, method_id: str) -> bool:
        return method_id == CASH_METHOD_ID or self.get_bank_account(method_id) is not None

    def payment_method_name(self, method_id: str) -> str:
        if method_id == CASH_METHOD_ID:
            return CASH_METHOD_NAME
        account = self.get_bank_account(method_id)
        return account.name if account else method_id


class Profile(LedgerModel):
    """Top-level container; one is active at a time."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    country_code: str = Field(..., min_length=2, max_length=3)
    currency: str = Field(..., min_length=3, max_length=3)
    data: ProfileData = Field(default_factory=ProfileData)


class LedgerSnapshot(LedgerModel):
    """The persisted unit: every profile plus the active profile id."""

    profiles: list[Profile] = Field(default_factory=list)
    active_profile_id: Optional[str] = None

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        return next((p for p in self.profiles if p.id == profile_id), None)


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="cat-1", name="Comida", icon="🍔"),
    Category(id="cat-2", name="Transporte", icon="🚗"),
    Category(id="cat-3", name="Compras", icon="🛒"),
    Category(id="cat-4", name="Hogar", icon="🏠"),
    Category(id="cat-5", name="Facturas", icon="📄"),
    Category(id="cat-6", name="Salud", icon="💊"),
    Category(id="cat-7", name="Educación", icon="🎓"),
    Category(id="cat-8", name="Ocio", icon="🍿"),
    Category(id="cat-9", name="Otros", icon="🏷️"),
    Category(id="cat-ahorro", name="Ahorro", icon="💰"),
)
