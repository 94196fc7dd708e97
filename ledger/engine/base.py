"""
Shared building blocks for engine operations.

Every operation follows the same shape: read the snapshot, build a
candidate snapshot, validate, return it. Nothing here mutates its input.
"""

from collections.abc import Iterable, Sequence
from typing import Optional, TypeVar, Union

from ledger.errors import EntityNotFoundError, InsufficientFundsError, InvalidInputError
from ledger.models.ledger import (
    DESCRIPTION_MAX_LENGTH,
    DebtPaymentLink,
    DebtRecord,
    LedgerModel,
    LoanRepaymentLink,
    PatrimonyAdditionLink,
    PatrimonyCreationLink,
    PatrimonyType,
    ProfileData,
    Transaction,
)
from ledger.validation.validator import ensure_valid_balances


T = TypeVar("T", bound=LedgerModel)

DEBT_COLLECTIONS = {
    PatrimonyType.LIABILITY: "liabilities",
    PatrimonyType.LOAN: "loans",
}

ENTITY_LABELS = {
    PatrimonyType.ASSET: "Saving",
    PatrimonyType.LIABILITY: "Debt",
    PatrimonyType.LOAN: "Loan",
}


def find_by_id(items: Iterable[T], item_id: str) -> Optional[T]:
    return next((item for item in items if item.id == item_id), None)


def require_by_id(items: Iterable[T], item_id: str, label: str) -> T:
    """Return the item with `item_id` or raise EntityNotFoundError."""
    item = find_by_id(items, item_id)
    if item is None:
        raise EntityNotFoundError(label, item_id)
    return item


def replace_by_id(items: Sequence[T], replacement: T) -> list[T]:
    """Return a new list with the item sharing `replacement.id` swapped in place."""
    return [replacement if item.id == replacement.id else item for item in items]


def remove_by_id(items: Sequence[T], item_id: str) -> list[T]:
    return [item for item in items if item.id != item_id]


def as_debt_kind(kind: Union[PatrimonyType, str]) -> PatrimonyType:
    """Normalize 'liability'/'loan' (or their addition kinds) to the entity kind."""
    try:
        kind = PatrimonyType(kind).entity_kind
    except ValueError:
        raise InvalidInputError(f"Unknown patrimony kind: {kind}")
    if kind not in DEBT_COLLECTIONS:
        raise InvalidInputError(f"{kind.value} is not a debt or loan")
    return kind


def debt_records(data: ProfileData, kind: PatrimonyType) -> list[DebtRecord]:
    return getattr(data, DEBT_COLLECTIONS[kind])


def get_debt_record(data: ProfileData, kind: PatrimonyType, entity_id: str) -> Optional[DebtRecord]:
    return find_by_id(debt_records(data, kind), entity_id)


def require_debt_record(data: ProfileData, kind: PatrimonyType, entity_id: str) -> DebtRecord:
    return require_by_id(debt_records(data, kind), entity_id, ENTITY_LABELS[kind])


def with_debt_record(data: ProfileData, kind: PatrimonyType, record: DebtRecord) -> ProfileData:
    """Return `data` with `record` replacing the entity of the same id."""
    collection = DEBT_COLLECTIONS[kind]
    return data.model_copy(
        update={collection: replace_by_id(getattr(data, collection), record)}
    )


def is_linked_to(transaction: Transaction, entity_id: str) -> bool:
    """True if the transaction created, increased, paid or repaid `entity_id`."""
    link = transaction.linkage
    if isinstance(link, (PatrimonyCreationLink, PatrimonyAdditionLink)):
        return link.entity_id == entity_id
    if isinstance(link, DebtPaymentLink):
        return link.liability_id == entity_id
    if isinstance(link, LoanRepaymentLink):
        return link.loan_id == entity_id
    return False


def movement_description(prefix: str, subject: str) -> str:
    """`prefix: subject`, with the subject clipped to fit a transaction description."""
    text = f"{prefix}: {subject}"
    if len(text) <= DESCRIPTION_MAX_LENGTH:
        return text
    return text[:DESCRIPTION_MAX_LENGTH - 1] + "…"


def commit(
    data: ProfileData,
    error_cls: type[InsufficientFundsError] = InsufficientFundsError,
    **changes,
) -> ProfileData:
    """
    Build the candidate snapshot and run the balance gate on it.

    Raises `error_cls` (the snapshot passed in stays untouched) when any
    payment method would end below zero.
    """
    candidate = data.model_copy(update=changes)
    ensure_valid_balances(candidate.transactions, candidate.bank_accounts, error_cls)
    return candidate
