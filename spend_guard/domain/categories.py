"""Shared category taxonomy used by every engine component"""

from typing import FrozenSet, List, Optional

from spend_guard.domain.models import Classification, Direction

ESSENTIAL_CATEGORIES: FrozenSet[str] = frozenset(
    {"Rent", "Utilities", "Insurance", "EMI", "Groceries", "Healthcare"}
)

# Discretionary categories reported as blocked while the kill-switch is ORANGE or RED
DISCRETIONARY_BLOCKLIST: List[str] = ["Entertainment", "Shopping", "Dining", "Travel"]

UNCATEGORIZED = "Uncategorized"


def is_essential(category: Optional[str]) -> bool:
    """Missing or unknown categories are non-essential"""
    return category is not None and category in ESSENTIAL_CATEGORIES


def classify(direction: Direction, category: Optional[str]) -> Classification:
    if direction == Direction.INCOME:
        return Classification.INCOME
    if is_essential(category):
        return Classification.ESSENTIAL
    return Classification.NON_ESSENTIAL
