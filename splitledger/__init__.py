"""
Split Ledger - Source Package

Records shared expenses for a group of people, works out who owes whom,
and records settlements.

DESIGN PRINCIPLES:
1. Balances are derived, never stored
2. Validate at the edge, trust the snapshot inside
3. Invalid input is rejected, not repaired
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
