"""
WIC Shopping Assistant - Source Package

Tracks a WIC participant's benefit balances while they shop, checks
scanned products against the Approved Product List, and suggests
eligible (and healthier) alternatives.

DESIGN PRINCIPLES:
1. Never exceed a benefit cap silently; extra units are charged as PAID
2. The in-memory ledger is authoritative for the session
3. Storage failures are visible (logged and audited), never fatal
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "WIC Shopping Assistant Team"
