"""
Ledger Guard - Source Package

A local-only personal ledger that tracks deposits and withdrawals per
account holder and settles compounding monthly interest.

DESIGN PRINCIPLES:
1. The ledger engine is pure: snapshot in, reports out
2. The transaction log is append-only
3. Interest for a month is posted at most once
4. Nothing leaves the machine
"""

__version__ = "1.0.0"
__author__ = "Ledger Guard Team"
