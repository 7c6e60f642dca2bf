"""Rule-of-thumb split of a total travel budget."""
from __future__ import annotations

from typing import Dict

BUDGET_SHARES = {
    "accommodation": 0.40,
    "transportation": 0.20,
    "activities": 0.20,
    "food": 0.15,
    "miscellaneous": 0.05,
}


def split_budget(total: float) -> Dict[str, float]:
    """Allocate ``total`` across spending categories, rounded to cents.

    Rounding drift is folded into ``miscellaneous`` so the parts add up to
    the rounded total.
    """
    if total <= 0:
        raise ValueError("Budget must be positive")
    parts = {name: round(total * share, 2) for name, share in BUDGET_SHARES.items()}
    drift = round(round(total, 2) - sum(parts.values()), 2)
    parts["miscellaneous"] = round(parts["miscellaneous"] + drift, 2)
    return parts
