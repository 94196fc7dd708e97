"""
Ledger - Source Package

A client-side personal finance ledger: income, expenses, transfers,
savings, debts and loans tracked per profile (one profile per country
or currency).

DESIGN PRINCIPLES:
1. Snapshot in → snapshot out (no partial application)
2. Fail early, fail visibly
3. No silent corrections
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Ledger Team"
