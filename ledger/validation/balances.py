"""Balance calculation.

Derives per-payment-method balances from the transaction log.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal

from ledger.models.ledger import CASH_METHOD_ID, BankAccount, Transaction


def compute_balances(
    transactions: Iterable[Transaction],
    bank_accounts: Iterable[BankAccount],
) -> dict[str, Decimal]:
    """Compute the balance of every payment method.

    Cash and every known bank account start at zero, so methods with no
    movements still appear. Transactions are folded in ascending date order
    (stable for equal dates); gifts move no money and are skipped.

    Args:
        transactions: Transaction log in any order.
        bank_accounts: Bank accounts of the profile.

    Returns:
        Mapping of payment method id to balance.
    """
    balances: dict[str, Decimal] = {CASH_METHOD_ID: Decimal("0")}
    for account in bank_accounts:
        balances[account.id] = Decimal("0")

    for t in sorted(transactions, key=lambda x: x.date):
        if t.is_gift:
            continue
        balances[t.payment_method_id] = (
            balances.get(t.payment_method_id, Decimal("0")) + t.signed_amount
        )

    return balances


def total_balance(balances: Mapping[str, Decimal]) -> Decimal:
    """Sum of all per-method balances."""
    return sum(balances.values(), Decimal("0"))
