"""
WIC Category Rules

Category names arrive from the APL in free text ("Milk Products",
"  fresh   fruit "). Every balance and basket line is keyed by the
canonical form produced here.

DESIGN DECISION: Default caps are a policy table, not computed.
The APL does NOT carry caps, so a category's allowance is derived
once, the first time the ledger sees it. Rule order matters:
the first matching rule wins.
"""

import re
from typing import Optional

# Synthetic uncapped category for units bought past the benefit cap
PAID_CATEGORY = "PAID"

DEFAULT_ALLOWANCE = 2

# (substrings, allowance) - None means unlimited
ALLOWANCE_RULES: tuple[tuple[tuple[str, ...], Optional[int]], ...] = (
    (("CVB", "FRUIT", "VEGETABLE"), None),
    (("MILK", "CHEESE", "YOGURT", "DAIRY"), 3),
    (("BREAD", "GRAIN", "CEREAL"), 2),
    (("MEAT", "BEAN", "PEANUT"), 1),
    (("JUICE",), 1),
)

_WHITESPACE = re.compile(r"\s+")


def canonicalize(raw: str) -> str:
    """
    Canonical category key: trimmed, whitespace-collapsed, upper-cased.

    Example: "  Milk   Products " -> "MILK PRODUCTS"
    """
    return _WHITESPACE.sub(" ", str(raw).strip()).upper()


def derive_allowed(category: str) -> Optional[int]:
    """
    Default allowance for a category seen for the first time.

    Returns None for uncapped categories (PAID, CVB, fruits and
    vegetables), otherwise the cap of the first matching rule,
    falling back to DEFAULT_ALLOWANCE.
    """
    canon = canonicalize(category)
    if canon == PAID_CATEGORY:
        return None
    for substrings, allowance in ALLOWANCE_RULES:
        if any(s in canon for s in substrings):
            return allowance
    return DEFAULT_ALLOWANCE
