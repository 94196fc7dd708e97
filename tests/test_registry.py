"""Tests for profiles, categories, bank accounts and expense templates."""

from decimal import Decimal

import pytest

from ledger.engine import (
    add_bank_account,
    add_category,
    add_fixed_expense,
    add_quick_expense,
    add_transaction,
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
from ledger.errors import EntityNotFoundError, InvalidInputError, ReferentialIntegrityError
from ledger.models import CASH_METHOD_ID


class TestProfiles:
    """Tests for profile creation."""

    def test_new_profile_has_default_categories(self):
        """Test the seeded categories."""
        profile = create_profile("Casa", "es", "eur")
        names = [c.name for c in profile.data.categories]
        assert names[0] == "Comida"
        assert "Ahorro" in names
        assert len(names) == 10
        assert profile.currency == "EUR"
        assert profile.country_code == "ES"
        assert profile.data.transactions == []

    def test_bad_currency(self):
        """Test that currencies are 3-letter codes."""
        with pytest.raises(InvalidInputError):
            create_profile("Casa", "ES", "EURO")

    def test_missing_name(self):
        """Test that the profile name is required."""
        with pytest.raises(InvalidInputError):
            create_profile("", "ES", "EUR")


class TestCategories:
    """Tests for category CRUD."""

    def test_add_and_update(self, empty_data):
        """Test adding then renaming a category."""
        data = add_category(empty_data, name="Mascotas", icon="🐶")
        category = data.categories[-1]
        data = update_category(data, category_id=category.id, name="Perro", color="#aa0000")
        updated = data.get_category(category.id)
        assert updated.name == "Perro"
        assert updated.icon == "🐶"
        assert updated.color == "#aa0000"

    def test_duplicate_name_is_rejected(self, empty_data):
        """Test that names are unique regardless of case."""
        with pytest.raises(InvalidInputError):
            add_category(empty_data, name="comida")

    def test_delete_unused(self, empty_data):
        """Test deleting a category nobody uses."""
        data = delete_category(empty_data, "cat-9")
        assert data.get_category("cat-9") is None

    def test_delete_in_use_is_refused(self, funded_data):
        """Test the referential integrity guard."""
        data = add_transaction(
            funded_data,
            description="Pan",
            amount="2",
            date="2024-01-02",
            type="expense",
            payment_method_id=CASH_METHOD_ID,
            category_id="cat-1",
        )
        with pytest.raises(ReferentialIntegrityError):
            delete_category(data, "cat-1")

    def test_delete_unknown(self, empty_data):
        """Test deleting a missing category."""
        with pytest.raises(EntityNotFoundError):
            delete_category(empty_data, "cat-404")

    def test_reorder(self, empty_data):
        """Test a valid permutation."""
        ids = [c.id for c in empty_data.categories]
        data = reorder_categories(empty_data, list(reversed(ids)))
        assert [c.id for c in data.categories] == list(reversed(ids))

    def test_reorder_requires_permutation(self, empty_data):
        """Test that missing or repeated ids are refused."""
        ids = [c.id for c in empty_data.categories]
        with pytest.raises(InvalidInputError):
            reorder_categories(empty_data, ids[:-1])
        with pytest.raises(InvalidInputError):
            reorder_categories(empty_data, [ids[0], *ids[:-1]])


class TestBankAccounts:
    """Tests for bank account CRUD."""

    def test_add_update_delete(self, empty_data):
        """Test the full lifecycle of an unused account."""
        data = add_bank_account(empty_data, name="Ahorros", color="#111111")
        account = data.bank_accounts[-1]
        assert data.is_known_method(account.id)

        data = update_bank_account(data, account_id=account.id, name="Ahorros 2")
        assert data.get_bank_account(account.id).name == "Ahorros 2"
        assert data.get_bank_account(account.id).color == "#111111"

        data = delete_bank_account(data, account.id)
        assert data.get_bank_account(account.id) is None

    def test_default_color(self, empty_data):
        """Test the default account colour."""
        data = add_bank_account(empty_data, name="Otro")
        assert data.bank_accounts[-1].color == "#3b82f6"

    def test_delete_in_use_is_refused(self, funded_data):
        """Test that accounts with movements cannot be deleted."""
        with pytest.raises(ReferentialIntegrityError):
            delete_bank_account(funded_data, "bank-1")

    def test_cash_cannot_be_deleted(self, empty_data):
        """Test that the reserved cash method is permanent."""
        with pytest.raises(InvalidInputError):
            delete_bank_account(empty_data, CASH_METHOD_ID)


class TestExpenseTemplates:
    """Tests for fixed and quick expenses."""

    def test_fixed_expense_lifecycle(self, empty_data):
        """Test add, update and delete of a fixed expense."""
        data = add_fixed_expense(empty_data, name="Alquiler", amount="700", category_id="cat-4")
        expense = data.fixed_expenses[0]
        data = update_fixed_expense(data, expense_id=expense.id, name="Alquiler piso", amount="750")
        assert data.fixed_expenses[0].amount == Decimal("750")
        assert data.fixed_expenses[0].category_id is None
        data = delete_fixed_expense(data, expense.id)
        assert data.fixed_expenses == []

    def test_fixed_expense_unknown_category(self, empty_data):
        """Test that template categories are checked."""
        with pytest.raises(EntityNotFoundError):
            add_fixed_expense(empty_data, name="Alquiler", amount="700", category_id="cat-x")

    def test_quick_expense_lifecycle(self, empty_data):
        """Test add, update and delete of a quick expense."""
        data = add_quick_expense(empty_data, name="Café", amount="1.5", icon="☕")
        expense = data.quick_expenses[0]
        data = update_quick_expense(data, expense_id=expense.id, name="Café", amount="1.8")
        assert data.quick_expenses[0].amount == Decimal("1.8")
        assert data.quick_expenses[0].icon == "☕"
        data = delete_quick_expense(data, expense.id)
        assert data.quick_expenses == []

    def test_negative_amount_is_rejected(self, empty_data):
        """Test template amount validation."""
        with pytest.raises(InvalidInputError):
            add_quick_expense(empty_data, name="Café", amount="-1")
