"""
Transaction Operations

Adding, transferring, updating and deleting ledger transactions.

DESIGN DECISION: Deletion is a cascade, not a single removal.
A transaction may exist because of something else (a transfer, a saving,
a debt payment). Removing it must undo that something else too, and the
whole cascade is validated as one unit: if the ledger that results would
have a negative balance anywhere, nothing is deleted.

The dispatch below is exhaustive over the Linkage variants.
"""

from typing import Any, Optional, Union

from ledger.config import get_settings
from ledger.engine.base import commit, movement_description, replace_by_id, require_by_id
from ledger.engine.patrimony import (
    purge_asset,
    purge_debt_record,
    restore_paid_amount,
    restore_savings,
    revert_addition,
)
from ledger.errors import CascadeValidationError, EntityNotFoundError, InvalidInputError
from ledger.models.ledger import (
    CASH_METHOD_ID,
    ArchivedLink,
    DebtPaymentLink,
    FixedExpense,
    LoanRepaymentLink,
    NoLinkage,
    PatrimonyAdditionLink,
    PatrimonyCreationLink,
    PatrimonyType,
    ProfileData,
    SavingsSpendLink,
    Transaction,
    TransactionType,
    TransferLink,
    new_id,
)
from ledger.validation.validator import (
    require_date,
    require_known_method,
    require_non_negative_amount,
    require_positive_amount,
    require_text,
)


def _parse_type(value: Union[TransactionType, str]) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise InvalidInputError(f"Transaction type must be 'income' or 'expense', got {value!r}")


def _first_income_date(data: ProfileData):
    dates = [t.date for t in data.transactions if t.type == TransactionType.INCOME]
    return min(dates) if dates else None


# =============================================================================
# ADD
# =============================================================================

def add_transaction(
    data: ProfileData,
    *,
    description: str,
    amount: Any,
    date: Any,
    type: Union[TransactionType, str],
    payment_method_id: str,
    category_id: Optional[str] = None,
    details: Optional[str] = None,
) -> ProfileData:
    """
    Add a plain income or expense.

    Args:
        data: Current profile data.
        description: What the money was for.
        amount: Positive amount.
        date: Calendar day of the movement.
        type: 'income' or 'expense'.
        payment_method_id: Bank account id or the cash id.
        category_id: Optional category; expenses default to "General".
        details: Optional free text note.

    Returns:
        The new profile data with the transaction prepended.

    Raises:
        InvalidInputError: Bad or missing parameter.
        InsufficientFundsError: The payment method would go negative.
    """
    description = require_text(description)
    amount = require_positive_amount(amount)
    date = require_date(date)
    tx_type = _parse_type(type)
    payment_method_id = require_known_method(data, payment_method_id)

    if category_id:
        if data.get_category(category_id) is None:
            raise EntityNotFoundError("Category", category_id)
    elif tx_type == TransactionType.EXPENSE:
        default = data.find_category_by_name(get_settings().ledger.default_category_name)
        category_id = default.id if default else None

    if tx_type == TransactionType.EXPENSE:
        first_income = _first_income_date(data)
        if first_income is not None and date < first_income:
            raise InvalidInputError(
                f"An expense cannot be dated before the first income ({first_income.isoformat()})"
            )

    transaction = Transaction(
        description=description,
        amount=amount,
        date=date,
        type=tx_type,
        payment_method_id=payment_method_id,
        category_id=category_id,
        details=details or None,
    )
    return commit(data, transactions=[transaction, *data.transactions])


def add_transfer(
    data: ProfileData,
    *,
    from_method_id: str,
    to_method_id: str,
    amount: Any,
    date: Any,
    details: Optional[str] = None,
) -> ProfileData:
    """
    Move money between two payment methods.

    Both legs share one transfer id and commit together or not at all.
    """
    amount = require_positive_amount(amount)
    date = require_date(date)
    from_method_id = require_known_method(data, from_method_id)
    to_method_id = require_known_method(data, to_method_id)
    if from_method_id == to_method_id:
        raise InvalidInputError("Origin and destination must be different payment methods")

    link = TransferLink(transfer_id=new_id())
    description = movement_description(
        "Transferencia",
        f"{data.payment_method_name(from_method_id)} → {data.payment_method_name(to_method_id)}",
    )
    outgoing = Transaction(
        description=description,
        amount=amount,
        date=date,
        type=TransactionType.EXPENSE,
        payment_method_id=from_method_id,
        details=details or None,
        linkage=link,
    )
    incoming = Transaction(
        description=description,
        amount=amount,
        date=date,
        type=TransactionType.INCOME,
        payment_method_id=to_method_id,
        details=details or None,
        linkage=link,
    )
    return commit(data, transactions=[outgoing, incoming, *data.transactions])


def gift_fixed_expense(
    data: ProfileData,
    *,
    expense_id: str,
    date: Any,
    details: Optional[str] = None,
) -> ProfileData:
    """
    Mark a fixed expense as paid without moving any money.

    The gift carries the fixed expense's exact name so the monthly
    paid-status check recognizes it. Gifts never reach the balance fold,
    so no validation is needed.
    """
    expense: FixedExpense = require_by_id(data.fixed_expenses, expense_id, "Fixed expense")
    date = require_date(date)

    note = details.strip() if details else ""
    gift = Transaction(
        description=expense.name,
        amount=expense.amount,
        date=date,
        type=TransactionType.EXPENSE,
        payment_method_id=CASH_METHOD_ID,
        category_id=expense.category_id,
        details=(
            f"{note} (Marcado como pagado sin restar saldo)" if note
            else "Marcado como pagado manualmente (Sin restar saldo)"
        ),
        is_gift=True,
    )
    return data.model_copy(update={"transactions": [gift, *data.transactions]})


# =============================================================================
# UPDATE
# =============================================================================

def update_transaction(data: ProfileData, transaction: Transaction) -> ProfileData:
    """
    Replace a free-standing transaction in place.

    Transfers, patrimony movements and archived movements are structural
    and cannot be edited; delete and re-create them instead.
    """
    existing = require_by_id(data.transactions, transaction.id, "Transaction")
    if not existing.is_free_standing or not transaction.is_free_standing:
        raise InvalidInputError(
            "Only plain income and expense transactions can be edited"
        )

    require_text(transaction.description)
    if transaction.is_gift:
        require_non_negative_amount(transaction.amount)
    else:
        require_positive_amount(transaction.amount)
    require_known_method(data, transaction.payment_method_id)
    if transaction.category_id and data.get_category(transaction.category_id) is None:
        raise EntityNotFoundError("Category", transaction.category_id)

    return commit(data, transactions=replace_by_id(data.transactions, transaction))


# =============================================================================
# DELETE
# =============================================================================

def deletion_confirmation_message(data: ProfileData, transaction_id: str) -> str:
    """
    Describe what deleting this transaction will also undo.

    Advisory text for the caller to show before asking for confirmation.
    """
    transaction = require_by_id(data.transactions, transaction_id, "Transaction")
    link = transaction.linkage

    if isinstance(link, TransferLink):
        return "This is a transfer. Both legs of the transfer will be deleted."
    if isinstance(link, PatrimonyCreationLink):
        if link.patrimony_type is PatrimonyType.ASSET:
            return "This transaction created a saving. The saving will be deleted too."
        if link.patrimony_type is PatrimonyType.LIABILITY:
            return ("This transaction created a debt. The debt and all of its "
                    "payments will be deleted too.")
        return ("This transaction created a loan. The loan and all of its "
                "repayments will be deleted too.")
    if isinstance(link, PatrimonyAdditionLink):
        return ("This transaction increased a debt or loan. "
                "Its amount will be reduced accordingly.")
    if isinstance(link, DebtPaymentLink):
        return "This is a debt payment. The amount will be added back to the debt."
    if isinstance(link, LoanRepaymentLink):
        return "This is a loan repayment. The amount will be added back to the loan."
    if isinstance(link, SavingsSpendLink):
        return ("This is a spend from savings. Both movements will be deleted and "
                "the money returned to the savings it came from.")
    if isinstance(link, ArchivedLink):
        return (f"This movement belongs to the archived {link.entity_name}. "
                f"Deleting it will change your balances.")
    return "Delete this transaction?"


def delete_transaction(data: ProfileData, transaction_id: str) -> ProfileData:
    """
    Delete a transaction and undo whatever it caused.

    Raises:
        EntityNotFoundError: No such transaction.
        InvalidInputError: The linked entity cannot be reverted.
        CascadeValidationError: The resulting ledger would be invalid.
    """
    transaction = require_by_id(data.transactions, transaction_id, "Transaction")
    link = transaction.linkage

    if isinstance(link, TransferLink):
        candidate = data.model_copy(update={"transactions": [
            t for t in data.transactions
            if not (isinstance(t.linkage, TransferLink) and t.linkage.transfer_id == link.transfer_id)
        ]})
    elif isinstance(link, PatrimonyCreationLink):
        if link.patrimony_type is PatrimonyType.ASSET:
            if any(a.id == link.entity_id for a in data.assets):
                candidate = purge_asset(data, link.entity_id)
            else:
                candidate = _without(data, transaction_id)
        else:
            kind = link.patrimony_type
            records = data.liabilities if kind is PatrimonyType.LIABILITY else data.loans
            if any(r.id == link.entity_id for r in records):
                candidate = purge_debt_record(data, kind, link.entity_id)
            else:
                candidate = _without(data, transaction_id)
    elif isinstance(link, PatrimonyAdditionLink):
        candidate = revert_addition(_without(data, transaction_id), link, transaction.amount)
    elif isinstance(link, DebtPaymentLink):
        candidate = restore_paid_amount(
            _without(data, transaction_id),
            PatrimonyType.LIABILITY,
            link.liability_id,
            transaction.amount,
        )
    elif isinstance(link, LoanRepaymentLink):
        candidate = restore_paid_amount(
            _without(data, transaction_id),
            PatrimonyType.LOAN,
            link.loan_id,
            transaction.amount,
        )
    elif isinstance(link, SavingsSpendLink):
        remaining = data.model_copy(update={"transactions": [
            t for t in data.transactions
            if not (isinstance(t.linkage, SavingsSpendLink) and t.linkage.spend_id == link.spend_id)
        ]})
        candidate = restore_savings(remaining, link)
    elif isinstance(link, (ArchivedLink, NoLinkage)):
        candidate = _without(data, transaction_id)
    else:
        raise InvalidInputError(f"Unsupported transaction linkage: {link.kind}")

    return commit(candidate, CascadeValidationError)


def _without(data: ProfileData, transaction_id: str) -> ProfileData:
    return data.model_copy(update={
        "transactions": [t for t in data.transactions if t.id != transaction_id]
    })
