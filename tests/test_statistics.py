"""Tests for derived statistics."""

import datetime as dt
from decimal import Decimal

from ledger.engine import (
    add_fixed_expense,
    add_transaction,
    add_transfer,
    create_saving,
    gift_fixed_expense,
    save_liability,
    save_loan,
)
from ledger.models import CASH_METHOD_ID
from ledger.queries import (
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


TODAY = dt.date(2024, 2, 15)


def _spend(data, description, amount, date="2024-02-03", method=CASH_METHOD_ID):
    return add_transaction(
        data,
        description=description,
        amount=amount,
        date=date,
        type="expense",
        payment_method_id=method,
    )


class TestSummaries:
    """Tests for income/expense totals."""

    def test_only_plain_movements_count(self, funded_data):
        """Test that transfers, patrimony movements and gifts are excluded."""
        data = _spend(funded_data, "Super", "40")
        data = add_transfer(
            data, from_method_id=CASH_METHOD_ID, to_method_id="bank-1", amount="100", date="2024-02-04",
        )
        data = create_saving(data, value="50", date="2024-02-05", source_method_id=CASH_METHOD_ID)
        data = save_liability(
            data, name="Coche", amount="300", date="2024-02-06", destination_method_id="bank-1",
        )
        data = add_fixed_expense(data, name="Luz", amount="60")
        data = gift_fixed_expense(data, expense_id=data.fixed_expenses[0].id, date="2024-02-07")

        counted = [t for t in data.transactions if is_countable(t)]
        assert len(counted) == 3

        total = total_summary(data.transactions)
        assert total.income == Decimal("1500")
        assert total.income_cash == Decimal("1000")
        assert total.income_bank == Decimal("500")
        assert total.expenses == Decimal("40")
        assert total.expenses_cash == Decimal("40")
        assert total.net == Decimal("1460")

    def test_monthly_summary_is_limited_to_month(self, funded_data):
        """Test that only the current calendar month is counted."""
        data = _spend(funded_data, "Enero", "10", date="2024-01-20")
        data = _spend(data, "Febrero", "25", date="2024-02-01", method="bank-1")
        month = monthly_summary(data.transactions, today=TODAY)
        assert month.income == Decimal("0")
        assert month.expenses == Decimal("25")
        assert month.expenses_bank == Decimal("25")


class TestFixedExpenses:
    """Tests for the paid/unpaid heuristic."""

    def test_paid_by_exact_name(self, funded_data):
        """Test that an expense this month with the same name marks it paid."""
        data = add_fixed_expense(funded_data, name="Internet", amount="45")
        data = add_fixed_expense(data, name="Agua", amount="20")
        data = _spend(data, "Internet", "45")
        data = _spend(data, "internet", "1")

        report = fixed_expense_status(data.fixed_expenses, data.transactions, today=TODAY)
        assert [(s.name, s.is_paid) for s in report.items] == [("Agua", False), ("Internet", True)]
        assert report.total == Decimal("65")
        assert report.paid == Decimal("45")
        assert report.remaining == Decimal("20")

    def test_last_month_payment_does_not_count(self, funded_data):
        """Test the monthly window."""
        data = _spend(funded_data, "Internet", "45", date="2024-01-20")
        assert "Internet" not in paid_fixed_expense_names(data.transactions, today=TODAY)

    def test_gift_marks_paid(self, empty_data):
        """Test that a gift counts as payment."""
        data = add_fixed_expense(empty_data, name="Gimnasio", amount="30")
        data = gift_fixed_expense(data, expense_id=data.fixed_expenses[0].id, date="2024-02-02")
        report = fixed_expense_status(data.fixed_expenses, data.transactions, today=TODAY)
        assert report.items[0].is_paid


class TestSavingsAndNetWorth:
    """Tests for savings grouping and net worth."""

    def test_directory_includes_cash(self, empty_data):
        """Test the payment method lookup."""
        directory = payment_method_directory(empty_data.bank_accounts)
        assert directory[CASH_METHOD_ID].name == "Efectivo"
        assert directory["bank-1"].name == "Banco"

    def test_savings_by_source(self, funded_data):
        """Test that savings are summed per source method."""
        data = create_saving(funded_data, value="100", date="2024-01-02", source_method_id=CASH_METHOD_ID)
        data = create_saving(data, value="50", date="2024-01-03", source_method_id=CASH_METHOD_ID)
        data = create_saving(data, value="200", date="2024-01-04", source_method_id="bank-1")

        sources = savings_by_source(data.assets, data.bank_accounts)
        assert [(s.name, s.total) for s in sources] == [
            ("Banco", Decimal("200")),
            ("Efectivo", Decimal("150")),
        ]

    def test_net_worth(self, funded_data):
        """Test liquid + savings + loans - liabilities."""
        data = create_saving(funded_data, value="100", date="2024-01-02", source_method_id=CASH_METHOD_ID)
        data = save_loan(data, name="Ana", amount="200", date="2024-01-03", source_method_id=CASH_METHOD_ID)
        data = save_liability(
            data, name="Coche", amount="300", date="2024-01-04", destination_method_id="bank-1",
        )
        summary = net_worth_summary(data)
        assert summary.liquid == Decimal("1500")
        assert summary.savings == Decimal("100")
        assert summary.loans_receivable == Decimal("200")
        assert summary.liabilities == Decimal("300")
        assert summary.net_worth == Decimal("1500")

    def test_build_overview(self, funded_data):
        """Test the bundled dashboard view."""
        overview = build_overview(funded_data, today=dt.date(2024, 1, 31))
        assert overview.total_balance == Decimal("1500")
        assert overview.balances[CASH_METHOD_ID] == Decimal("1000")
        assert overview.month.income == Decimal("1500")
        assert overview.net_worth.net_worth == Decimal("1500")
