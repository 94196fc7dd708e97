"""
Patrimony Operations

Savings (assets), debts (liabilities) and loans, and the transactions
that move money in and out of them.

Liabilities and loans are symmetric with the polarity reversed:
- Borrowing adds cash to a payment method (income); paying removes it.
- Lending removes cash (expense); a repayment brings it back (income).

An "initial" movement records a pre-existing debt or loan (or an increase
of one) without any transaction, so current balances are not falsified.

Invariant kept by every function here: 0 <= amount <= original_amount.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from ledger.config import get_settings
from ledger.engine.base import (
    ENTITY_LABELS,
    as_debt_kind,
    commit,
    debt_records,
    get_debt_record,
    is_linked_to,
    movement_description,
    remove_by_id,
    replace_by_id,
    require_by_id,
    require_debt_record,
    with_debt_record,
)
from ledger.errors import (
    CascadeValidationError,
    EntityNotFoundError,
    InsufficientFundsError,
    InvalidInputError,
)
from ledger.models.ledger import (
    ArchivedLink,
    Asset,
    DebtPaymentLink,
    DebtRecord,
    InitialAddition,
    Liability,
    Loan,
    LoanRepaymentLink,
    PatrimonyAdditionLink,
    PatrimonyCreationLink,
    PatrimonyType,
    ProfileData,
    SavingsSpendLink,
    Transaction,
    TransactionType,
    evolve,
    new_id,
)
from ledger.validation.balances import compute_balances
from ledger.validation.validator import (
    require_date,
    require_known_method,
    require_non_negative_amount,
    require_positive_amount,
    require_text,
)


class PaymentEntry(BaseModel):
    """One line of a batch debt payment or loan repayment."""

    entity_id: str = Field(..., min_length=1)
    amount: Decimal


def _as_payment_entries(payments: Iterable[Union[PaymentEntry, Mapping[str, Any]]]) -> list[PaymentEntry]:
    entries = []
    for payment in payments:
        if isinstance(payment, PaymentEntry):
            entries.append(payment)
        elif isinstance(payment, Mapping):
            entity_id = payment.get("entity_id") or payment.get("entityId")
            if not entity_id:
                raise InvalidInputError("Each payment must name a debt or loan")
            entries.append(PaymentEntry(
                entity_id=entity_id,
                amount=require_positive_amount(payment.get("amount"), "Payment amount"),
            ))
        else:
            raise InvalidInputError(f"Unsupported payment entry: {payment!r}")
    return entries


# =============================================================================
# SAVINGS
# =============================================================================

def create_saving(
    data: ProfileData,
    *,
    value: Any,
    date: Any,
    source_method_id: str,
    name: Optional[str] = None,
    details: Optional[str] = None,
) -> ProfileData:
    """
    Move money from a payment method into a new savings bucket.

    Creates the Asset and a paired expense tagged as an asset creation.
    """
    value = require_positive_amount(value, "Savings amount")
    date = require_date(date)
    source_method_id = require_known_method(data, source_method_id)

    available = compute_balances(data.transactions, data.bank_accounts)[source_method_id]
    if value > available:
        raise InsufficientFundsError(
            f"Insufficient funds in {data.payment_method_name(source_method_id)}: "
            f"{available:,.2f} available, {value:,.2f} requested"
        )

    asset = Asset(
        name=(name or "").strip() or "Ahorro",
        value=value,
        date=date,
        source_method_id=source_method_id,
    )
    savings_category = data.find_category_by_name(get_settings().ledger.savings_category_name)
    transaction = Transaction(
        description=asset.name,
        amount=value,
        date=date,
        type=TransactionType.EXPENSE,
        payment_method_id=source_method_id,
        category_id=savings_category.id if savings_category else None,
        details=details,
        linkage=PatrimonyCreationLink(patrimony_type=PatrimonyType.ASSET, entity_id=asset.id),
    )
    return commit(
        data,
        assets=[*data.assets, asset],
        transactions=[transaction, *data.transactions],
    )


def spend_from_savings(
    data: ProfileData,
    *,
    amount: Any,
    description: str,
    date: Any,
    source_method_id: str,
    category_id: Optional[str] = None,
    details: Optional[str] = None,
) -> ProfileData:
    """
    Spend money held in savings that came from `source_method_id`.

    Assets from that source are consumed oldest-date-first; assets from
    other sources are untouched. Two transactions are produced on the
    source method: an income withdrawal and the expense itself, sharing
    one spend id and the allocation map.
    """
    amount = require_positive_amount(amount)
    description = require_text(description)
    date = require_date(date)
    source_method_id = require_known_method(data, source_method_id)
    if category_id and data.get_category(category_id) is None:
        raise EntityNotFoundError("Category", category_id)

    pool = [a for a in data.assets if a.source_method_id == source_method_id]
    available = sum((a.value for a in pool), Decimal("0"))
    if amount > available:
        raise InsufficientFundsError(
            f"Only {available:,.2f} saved from "
            f"{data.payment_method_name(source_method_id)}; cannot spend {amount:,.2f}"
        )

    allocations: dict[str, Decimal] = {}
    remaining = amount
    for asset in sorted(pool, key=lambda a: a.date):
        if remaining <= 0:
            break
        take = min(asset.value, remaining)
        if take <= 0:
            continue
        allocations[asset.id] = take
        remaining -= take

    assets = [
        evolve(a, value=a.value - allocations[a.id]) if a.id in allocations else a
        for a in data.assets
    ]
    link = SavingsSpendLink(
        spend_id=new_id(),
        source_method_id=source_method_id,
        allocations=allocations,
    )
    withdrawal = Transaction(
        description=movement_description("Retiro de ahorros", description),
        amount=amount,
        date=date,
        type=TransactionType.INCOME,
        payment_method_id=source_method_id,
        linkage=link,
    )
    spend = Transaction(
        description=description,
        amount=amount,
        date=date,
        type=TransactionType.EXPENSE,
        payment_method_id=source_method_id,
        category_id=category_id,
        details=details,
        linkage=link,
    )
    return commit(
        data,
        assets=assets,
        transactions=[spend, withdrawal, *data.transactions],
    )


def delete_asset(data: ProfileData, asset_id: str) -> ProfileData:
    """Delete a saving, returning its money to the source method."""
    candidate = purge_asset(data, asset_id)
    return commit(candidate, CascadeValidationError)


# =============================================================================
# LIABILITIES AND LOANS
# =============================================================================

def _save_debt_record(
    data: ProfileData,
    kind: PatrimonyType,
    *,
    name: str,
    amount: Any,
    date: Any,
    method_id: Optional[str],
    is_initial: bool,
    details: str,
) -> ProfileData:
    name = require_text(name, "Description")
    amount = require_non_negative_amount(amount)
    date = require_date(date)

    moves_money = not is_initial and amount > 0
    if moves_money:
        method_id = require_known_method(data, method_id)
    else:
        method_id = None

    if kind is PatrimonyType.LIABILITY:
        record = Liability(
            name=name,
            details=details or "",
            amount=amount,
            original_amount=amount,
            date=date,
            destination_method_id=method_id,
        )
    else:
        record = Loan(
            name=name,
            details=details or "",
            amount=amount,
            original_amount=amount,
            date=date,
            source_method_id=method_id,
        )

    collection = "liabilities" if kind is PatrimonyType.LIABILITY else "loans"
    changes = {collection: [*debt_records(data, kind), record]}
    if not moves_money:
        return data.model_copy(update=changes)

    transaction = Transaction(
        description=name,
        amount=amount,
        date=date,
        type=TransactionType.INCOME if kind is PatrimonyType.LIABILITY else TransactionType.EXPENSE,
        payment_method_id=method_id,
        details=details or None,
        linkage=PatrimonyCreationLink(patrimony_type=kind, entity_id=record.id),
    )
    changes["transactions"] = [transaction, *data.transactions]
    return commit(data, **changes)


def save_liability(
    data: ProfileData,
    *,
    name: str,
    amount: Any,
    date: Any,
    destination_method_id: Optional[str] = None,
    is_initial: bool = False,
    details: str = "",
) -> ProfileData:
    """
    Register a debt.

    Unless `is_initial`, the borrowed amount is credited to
    `destination_method_id` with an income transaction.
    """
    return _save_debt_record(
        data,
        PatrimonyType.LIABILITY,
        name=name,
        amount=amount,
        date=date,
        method_id=destination_method_id,
        is_initial=is_initial,
        details=details,
    )


def save_loan(
    data: ProfileData,
    *,
    name: str,
    amount: Any,
    date: Any,
    source_method_id: Optional[str] = None,
    is_initial: bool = False,
    details: str = "",
) -> ProfileData:
    """
    Register money lent out.

    Unless `is_initial`, the lent amount leaves `source_method_id` with an
    expense transaction.
    """
    return _save_debt_record(
        data,
        PatrimonyType.LOAN,
        name=name,
        amount=amount,
        date=date,
        method_id=source_method_id,
        is_initial=is_initial,
        details=details,
    )


def _add_value(
    data: ProfileData,
    kind: PatrimonyType,
    entity_id: str,
    *,
    amount: Any,
    date: Any,
    method_id: Optional[str],
    is_initial: bool,
    details: str,
) -> ProfileData:
    amount = require_positive_amount(amount)
    date = require_date(date)
    record = require_debt_record(data, kind, entity_id)

    if is_initial:
        addition = InitialAddition(amount=amount, date=date, details=details or "")
        updated = evolve(
            record,
            amount=record.amount + amount,
            original_amount=record.original_amount + amount,
            initial_additions=[*record.initial_additions, addition],
        )
        return with_debt_record(data, kind, updated)

    method_id = require_known_method(data, method_id)
    if kind is PatrimonyType.LIABILITY:
        addition_type, tx_type = PatrimonyType.DEBT_ADDITION, TransactionType.INCOME
        description = movement_description("Aumento deuda", record.name)
    else:
        addition_type, tx_type = PatrimonyType.LOAN_ADDITION, TransactionType.EXPENSE
        description = movement_description("Aumento préstamo", record.name)

    transaction = Transaction(
        description=description,
        amount=amount,
        date=date,
        type=tx_type,
        payment_method_id=method_id,
        details=details or None,
        linkage=PatrimonyAdditionLink(patrimony_type=addition_type, entity_id=record.id),
    )
    updated = evolve(
        record,
        amount=record.amount + amount,
        original_amount=record.original_amount + amount,
    )
    candidate = with_debt_record(data, kind, updated)
    return commit(candidate, transactions=[transaction, *data.transactions])


def add_value_to_liability(
    data: ProfileData,
    *,
    liability_id: str,
    amount: Any,
    date: Any,
    destination_method_id: Optional[str] = None,
    is_initial: bool = False,
    details: str = "",
) -> ProfileData:
    """Increase a debt, optionally crediting the new money to a payment method."""
    return _add_value(
        data,
        PatrimonyType.LIABILITY,
        liability_id,
        amount=amount,
        date=date,
        method_id=destination_method_id,
        is_initial=is_initial,
        details=details,
    )


def add_value_to_loan(
    data: ProfileData,
    *,
    loan_id: str,
    amount: Any,
    date: Any,
    source_method_id: Optional[str] = None,
    is_initial: bool = False,
    details: str = "",
) -> ProfileData:
    """Lend more on an existing loan, optionally debiting a payment method."""
    return _add_value(
        data,
        PatrimonyType.LOAN,
        loan_id,
        amount=amount,
        date=date,
        method_id=source_method_id,
        is_initial=is_initial,
        details=details,
    )


def _update_debt_record(
    data: ProfileData,
    kind: PatrimonyType,
    entity_id: str,
    *,
    name: str,
    details: Optional[str],
    original_amount: Any,
    date: Any,
) -> ProfileData:
    record = require_debt_record(data, kind, entity_id)
    name = require_text(name, "Description")
    original_amount = require_non_negative_amount(original_amount, "Original amount")

    # Keep what has already been paid; only the stated original moves.
    amount = original_amount - record.paid_amount
    if amount < 0:
        raise InvalidInputError(
            f"The original amount cannot be lower than what has already been "
            f"paid ({record.paid_amount:,.2f})"
        )

    changes = {
        "name": name,
        "details": record.details if details is None else details.strip(),
        "original_amount": original_amount,
        "amount": amount,
    }
    if date is not None:
        changes["date"] = require_date(date)
    return with_debt_record(data, kind, evolve(record, **changes))


def update_liability(
    data: ProfileData,
    *,
    liability_id: str,
    name: str,
    original_amount: Any,
    details: Optional[str] = None,
    date: Any = None,
) -> ProfileData:
    """Correct a debt's name, details or stated original amount."""
    return _update_debt_record(
        data,
        PatrimonyType.LIABILITY,
        liability_id,
        name=name,
        details=details,
        original_amount=original_amount,
        date=date,
    )


def update_loan(
    data: ProfileData,
    *,
    loan_id: str,
    name: str,
    original_amount: Any,
    details: Optional[str] = None,
    date: Any = None,
) -> ProfileData:
    """Correct a loan's name, details or stated original amount."""
    return _update_debt_record(
        data,
        PatrimonyType.LOAN,
        loan_id,
        name=name,
        details=details,
        original_amount=original_amount,
        date=date,
    )


def update_addition(
    data: ProfileData,
    *,
    entity_kind: Union[PatrimonyType, str],
    entity_id: str,
    addition_id: str,
    amount: Any,
    date: Any = None,
    details: Optional[str] = None,
) -> ProfileData:
    """
    Edit a previously recorded initial addition.

    The difference between the new and old amount is applied to both the
    remaining and the original amount of the parent.
    """
    kind = as_debt_kind(entity_kind)
    record = require_debt_record(data, kind, entity_id)
    addition = require_by_id(record.initial_additions, addition_id, "Addition")
    amount = require_positive_amount(amount)

    delta = amount - addition.amount
    if record.amount + delta < 0:
        raise InvalidInputError(
            f"Reducing this addition by {-delta:,.2f} would leave {record.name} "
            f"with a negative remaining amount"
        )

    changes = {"amount": amount}
    if date is not None:
        changes["date"] = require_date(date)
    if details is not None:
        changes["details"] = details.strip()

    updated = evolve(
        record,
        amount=record.amount + delta,
        original_amount=record.original_amount + delta,
        initial_additions=replace_by_id(record.initial_additions, evolve(addition, **changes)),
    )
    return with_debt_record(data, kind, updated)


def _settle(
    data: ProfileData,
    kind: PatrimonyType,
    payments: Iterable[Union[PaymentEntry, Mapping[str, Any]]],
    method_id: str,
    date: Any,
) -> ProfileData:
    entries = _as_payment_entries(payments)
    if not entries:
        raise InvalidInputError("At least one payment is required")
    method_id = require_known_method(data, method_id)
    date = require_date(date)

    records: dict[str, DebtRecord] = {}
    transactions = []
    for entry in entries:
        amount = require_positive_amount(entry.amount, "Payment amount")
        record = records.get(entry.entity_id) or require_debt_record(data, kind, entry.entity_id)
        if amount > record.amount:
            raise InvalidInputError(
                f"Payment of {amount:,.2f} exceeds the remaining "
                f"{record.amount:,.2f} on {record.name}"
            )
        records[record.id] = evolve(record, amount=record.amount - amount)

        if kind is PatrimonyType.LIABILITY:
            transactions.append(Transaction(
                description=movement_description("Pago deuda", record.name),
                amount=amount,
                date=date,
                type=TransactionType.EXPENSE,
                payment_method_id=method_id,
                linkage=DebtPaymentLink(liability_id=record.id),
            ))
        else:
            transactions.append(Transaction(
                description=movement_description("Cobro préstamo", record.name),
                amount=amount,
                date=date,
                type=TransactionType.INCOME,
                payment_method_id=method_id,
                linkage=LoanRepaymentLink(loan_id=record.id),
            ))

    candidate = data
    for record in records.values():
        candidate = with_debt_record(candidate, kind, record)
    return commit(candidate, transactions=[*transactions, *data.transactions])


def pay_debts(
    data: ProfileData,
    *,
    payments: Iterable[Union[PaymentEntry, Mapping[str, Any]]],
    payment_method_id: str,
    date: Any,
) -> ProfileData:
    """
    Pay one or more debts from a single payment method.

    The batch is validated as a whole: if the method cannot cover every
    payment, none of them is committed.
    """
    return _settle(data, PatrimonyType.LIABILITY, payments, payment_method_id, date)


def receive_loan_payments(
    data: ProfileData,
    *,
    payments: Iterable[Union[PaymentEntry, Mapping[str, Any]]],
    payment_method_id: str,
    date: Any,
) -> ProfileData:
    """Record repayments received on one or more loans into one payment method."""
    return _settle(data, PatrimonyType.LOAN, payments, payment_method_id, date)


def _delete_debt_record(data: ProfileData, kind: PatrimonyType, entity_id: str) -> ProfileData:
    record = require_debt_record(data, kind, entity_id)
    if record.amount > get_settings().ledger.settled_threshold:
        candidate = purge_debt_record(data, kind, entity_id)
        return commit(candidate, CascadeValidationError)

    # Settled: archive. The money really moved, so the transactions stay.
    label = "Deuda archivada" if kind is PatrimonyType.LIABILITY else "Préstamo archivado"
    note = f"({label}: {record.name})"
    transactions = [
        evolve(
            t,
            linkage=ArchivedLink(former_kind=t.linkage.kind, entity_name=record.name),
            details=f"{t.details}\n{note}" if t.details else note,
        )
        if is_linked_to(t, entity_id) else t
        for t in data.transactions
    ]
    collection = "liabilities" if kind is PatrimonyType.LIABILITY else "loans"
    return data.model_copy(update={
        collection: remove_by_id(debt_records(data, kind), entity_id),
        "transactions": transactions,
    })


def delete_liability(data: ProfileData, liability_id: str) -> ProfileData:
    """
    Remove a debt.

    A settled debt is archived (its transactions are kept, unlinked).
    An active one is deleted together with every linked transaction,
    which reverts its effect on balances.
    """
    return _delete_debt_record(data, PatrimonyType.LIABILITY, liability_id)


def delete_loan(data: ProfileData, loan_id: str) -> ProfileData:
    """Remove a loan; same archive-or-cascade rule as delete_liability."""
    return _delete_debt_record(data, PatrimonyType.LOAN, loan_id)


# =============================================================================
# CASCADE HELPERS (used by transaction deletion; no balance check here)
# =============================================================================

def purge_asset(data: ProfileData, asset_id: str) -> ProfileData:
    """Remove an asset and the transaction that created it."""
    asset = require_by_id(data.assets, asset_id, ENTITY_LABELS[PatrimonyType.ASSET])
    creation = next(
        (
            t for t in data.transactions
            if isinstance(t.linkage, PatrimonyCreationLink) and t.linkage.entity_id == asset_id
        ),
        None,
    )
    if creation is not None and asset.value < creation.amount:
        raise InvalidInputError(
            f"{asset.name} has already been partly spent; "
            f"delete the spend transactions first"
        )
    return data.model_copy(update={
        "assets": remove_by_id(data.assets, asset_id),
        "transactions": [t for t in data.transactions if not is_linked_to(t, asset_id)],
    })


def purge_debt_record(data: ProfileData, kind: PatrimonyType, entity_id: str) -> ProfileData:
    """Remove a liability/loan together with every transaction linked to it."""
    require_debt_record(data, kind, entity_id)
    collection = "liabilities" if kind is PatrimonyType.LIABILITY else "loans"
    return data.model_copy(update={
        collection: remove_by_id(debt_records(data, kind), entity_id),
        "transactions": [t for t in data.transactions if not is_linked_to(t, entity_id)],
    })


def revert_addition(data: ProfileData, link: PatrimonyAdditionLink, amount: Decimal) -> ProfileData:
    """Undo a transaction-backed addition on its loan/liability, if it still exists."""
    kind = link.patrimony_type.entity_kind
    record = get_debt_record(data, kind, link.entity_id)
    if record is None:
        return data
    if record.amount - amount < 0:
        raise InvalidInputError(
            f"{record.name} has already been paid past this addition; "
            f"it cannot be removed"
        )
    return with_debt_record(data, kind, evolve(
        record,
        amount=record.amount - amount,
        original_amount=record.original_amount - amount,
    ))


def restore_paid_amount(
    data: ProfileData,
    kind: PatrimonyType,
    entity_id: str,
    amount: Decimal,
) -> ProfileData:
    """Add a removed payment back onto the entity it paid, if it still exists."""
    record = get_debt_record(data, kind, entity_id)
    if record is None:
        return data
    if record.amount + amount > record.original_amount:
        raise InvalidInputError(
            f"Restoring this payment would push {record.name} above its original amount"
        )
    return with_debt_record(data, kind, evolve(record, amount=record.amount + amount))


def restore_savings(data: ProfileData, link: SavingsSpendLink) -> ProfileData:
    """Give consumed value back to the assets a spend drew from."""
    assets = [
        evolve(a, value=a.value + link.allocations[a.id]) if a.id in link.allocations else a
        for a in data.assets
    ]
    return data.model_copy(update={"assets": assets})