"""Pure price and threshold formulas."""

from __future__ import annotations

from threshold_tracker.models.accounts import AmmReserves


def price_from_reserves(reserves: AmmReserves) -> float | None:
    """Spot price of the base token in quote units (quote / base).

    Returns None when either side is empty or the result is not positive.
    """
    if reserves.base_reserves <= 0 or reserves.quote_reserves <= 0:
        return None
    price = reserves.quote_reserves / reserves.base_reserves
    if price <= 0:
        return None
    return price


def compute_threshold(pass_price: float, fail_price: float) -> float:
    """Percentage by which the pass price exceeds the fail price.

    Returns 0.0 when the fail price is not positive.
    """
    if fail_price <= 0:
        return 0.0
    return (pass_price - fail_price) / fail_price * 100


def thresholds_disagree(text_value: float, price_value: float, tolerance: float) -> bool:
    """True when two threshold readings differ by more than *tolerance* points."""
    return abs(text_value - price_value) > tolerance
