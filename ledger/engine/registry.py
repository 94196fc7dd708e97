"""
Registry Operations

Profiles, categories, bank accounts and expense templates.

These entities carry no money themselves, but transactions point at them.
Deleting a category or bank account that any transaction still references
is refused; orphaned references would silently move money out of the
balance table or lose its classification.
"""

from collections.abc import Sequence
from typing import Any, Optional

from ledger.engine.base import remove_by_id, replace_by_id, require_by_id
from ledger.errors import EntityNotFoundError, InvalidInputError, ReferentialIntegrityError
from ledger.models.ledger import (
    CASH_METHOD_ID,
    DEFAULT_CATEGORIES,
    BankAccount,
    Category,
    FixedExpense,
    Profile,
    ProfileData,
    QuickExpense,
    evolve,
)
from ledger.validation.validator import require_non_negative_amount, require_text


# =============================================================================
# PROFILES
# =============================================================================

def create_profile(name: str, country_code: str, currency: str) -> Profile:
    """Build a new, empty profile seeded with the default categories."""
    name = require_text(name, "Profile name")
    country_code = require_text(country_code, "Country").upper()
    currency = require_text(currency, "Currency").upper()
    if len(currency) != 3:
        raise InvalidInputError(f"Currency must be a 3-letter code, got {currency!r}")
    return Profile(
        name=name,
        country_code=country_code,
        currency=currency,
        data=ProfileData(categories=list(DEFAULT_CATEGORIES)),
    )


# =============================================================================
# CATEGORIES
# =============================================================================

def add_category(
    data: ProfileData,
    *,
    name: str,
    icon: Optional[str] = None,
    color: Optional[str] = None,
) -> ProfileData:
    name = require_text(name, "Category name")
    if data.find_category_by_name(name) is not None:
        raise InvalidInputError(f"A category named {name!r} already exists")
    category = Category(name=name, icon=icon or "🏷️", color=color)
    return data.model_copy(update={"categories": [*data.categories, category]})


def update_category(
    data: ProfileData,
    *,
    category_id: str,
    name: Optional[str] = None,
    icon: Optional[str] = None,
    color: Optional[str] = None,
) -> ProfileData:
    category = require_by_id(data.categories, category_id, "Category")
    changes: dict[str, Any] = {}
    if name is not None:
        name = require_text(name, "Category name")
        clash = data.find_category_by_name(name)
        if clash is not None and clash.id != category_id:
            raise InvalidInputError(f"A category named {name!r} already exists")
        changes["name"] = name
    if icon is not None:
        changes["icon"] = icon
    if color is not None:
        changes["color"] = color
    return data.model_copy(update={
        "categories": replace_by_id(data.categories, evolve(category, **changes))
    })


def delete_category(data: ProfileData, category_id: str) -> ProfileData:
    """Delete a category no transaction uses."""
    category = require_by_id(data.categories, category_id, "Category")
    in_use = sum(1 for t in data.transactions if t.category_id == category_id)
    if in_use:
        raise ReferentialIntegrityError(
            f"Category {category.name} is used by {in_use} transaction(s) and cannot be deleted"
        )
    return data.model_copy(update={"categories": remove_by_id(data.categories, category_id)})


def reorder_categories(data: ProfileData, category_ids: Sequence[str]) -> ProfileData:
    """Reorder categories; `category_ids` must list every category exactly once."""
    ids = list(category_ids)
    current = {c.id: c for c in data.categories}
    if len(ids) != len(set(ids)) or set(ids) != set(current):
        raise InvalidInputError("The new order must contain every category exactly once")
    return data.model_copy(update={"categories": [current[i] for i in ids]})


# =============================================================================
# BANK ACCOUNTS
# =============================================================================

def add_bank_account(data: ProfileData, *, name: str, color: Optional[str] = None) -> ProfileData:
    name = require_text(name, "Account name")
    account = BankAccount(name=name, color=color) if color else BankAccount(name=name)
    return data.model_copy(update={"bank_accounts": [*data.bank_accounts, account]})


def update_bank_account(
    data: ProfileData,
    *,
    account_id: str,
    name: Optional[str] = None,
    color: Optional[str] = None,
) -> ProfileData:
    account = require_by_id(data.bank_accounts, account_id, "Bank account")
    changes: dict[str, Any] = {}
    if name is not None:
        changes["name"] = require_text(name, "Account name")
    if color is not None:
        changes["color"] = color
    return data.model_copy(update={
        "bank_accounts": replace_by_id(data.bank_accounts, evolve(account, **changes))
    })


def delete_bank_account(data: ProfileData, account_id: str) -> ProfileData:
    """Delete a bank account no transaction moves money through."""
    if account_id == CASH_METHOD_ID:
        raise InvalidInputError("Cash cannot be deleted")
    account = require_by_id(data.bank_accounts, account_id, "Bank account")
    in_use = sum(1 for t in data.transactions if t.payment_method_id == account_id)
    if in_use:
        raise ReferentialIntegrityError(
            f"Account {account.name} has {in_use} transaction(s) and cannot be deleted"
        )
    return data.model_copy(update={
        "bank_accounts": remove_by_id(data.bank_accounts, account_id)
    })


# =============================================================================
# EXPENSE TEMPLATES
# =============================================================================

def _check_category(data: ProfileData, category_id: Optional[str]) -> Optional[str]:
    if category_id and data.get_category(category_id) is None:
        raise EntityNotFoundError("Category", category_id)
    return category_id or None


def add_fixed_expense(
    data: ProfileData,
    *,
    name: str,
    amount: Any,
    category_id: Optional[str] = None,
) -> ProfileData:
    expense = FixedExpense(
        name=require_text(name, "Name"),
        amount=require_non_negative_amount(amount),
        category_id=_check_category(data, category_id),
    )
    return data.model_copy(update={"fixed_expenses": [*data.fixed_expenses, expense]})


def update_fixed_expense(
    data: ProfileData,
    *,
    expense_id: str,
    name: str,
    amount: Any,
    category_id: Optional[str] = None,
) -> ProfileData:
    """
    Edit a fixed expense.

    Paid status is matched by name, so renaming a template makes this
    month's earlier payment stop counting for it.
    """
    expense = require_by_id(data.fixed_expenses, expense_id, "Fixed expense")
    updated = evolve(
        expense,
        name=require_text(name, "Name"),
        amount=require_non_negative_amount(amount),
        category_id=_check_category(data, category_id),
    )
    return data.model_copy(update={
        "fixed_expenses": replace_by_id(data.fixed_expenses, updated)
    })


def delete_fixed_expense(data: ProfileData, expense_id: str) -> ProfileData:
    require_by_id(data.fixed_expenses, expense_id, "Fixed expense")
    return data.model_copy(update={
        "fixed_expenses": remove_by_id(data.fixed_expenses, expense_id)
    })


def add_quick_expense(
    data: ProfileData,
    *,
    name: str,
    amount: Any,
    category_id: Optional[str] = None,
    icon: Optional[str] = None,
) -> ProfileData:
    expense = QuickExpense(
        name=require_text(name, "Name"),
        amount=require_non_negative_amount(amount),
        category_id=_check_category(data, category_id),
        icon=icon,
    )
    return data.model_copy(update={"quick_expenses": [*data.quick_expenses, expense]})


def update_quick_expense(
    data: ProfileData,
    *,
    expense_id: str,
    name: str,
    amount: Any,
    category_id: Optional[str] = None,
    icon: Optional[str] = None,
) -> ProfileData:
    expense = require_by_id(data.quick_expenses, expense_id, "Quick expense")
    updated = evolve(
        expense,
        name=require_text(name, "Name"),
        amount=require_non_negative_amount(amount),
        category_id=_check_category(data, category_id),
        icon=icon if icon is not None else expense.icon,
    )
    return data.model_copy(update={
        "quick_expenses": replace_by_id(data.quick_expenses, updated)
    })


def delete_quick_expense(data: ProfileData, expense_id: str) -> ProfileData:
    require_by_id(data.quick_expenses, expense_id, "Quick expense")
    return data.model_copy(update={
        "quick_expenses": remove_by_id(data.quick_expenses, expense_id)
    })
