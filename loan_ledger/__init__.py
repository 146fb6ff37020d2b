"""
Loan Ledger - Source Package

A personal loan-tracking ledger: record money lent to borrowers,
the interest expected on top, and the repayments that come back.

DESIGN PRINCIPLES:
1. Status is derived, never set by hand
2. Ledger operations are pure; persistence is a side effect after them
3. Fail early, fail visibly; no silent corrections
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
