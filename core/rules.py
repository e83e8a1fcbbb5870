# core/rules.py
# Numeric rules shared by the metrics and the financials.

from __future__ import annotations


def round2(x: float) -> float:
    # stable rounding to cents / hundredths of a set
    return round(float(x) + 1e-9, 2)


def sets_from_strokes(strokes: float, strokes_per_set: float) -> float:
    """Sets used = strokes / strokes-per-set, to two decimals."""
    if strokes <= 0 or strokes_per_set <= 0:
        return 0.0
    return round2(strokes / strokes_per_set)


def margin_pct(profit: float, total: float) -> float:
    """Profit as a percent of total. 0 when there is no total to divide by."""
    if total <= 0:
        return 0.0
    return profit / total * 100.0
