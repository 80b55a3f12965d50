"""Integer arithmetic utilities for cents-based pricing.

All prices, fees, taxes, and discounts use int (cents). No float, no Decimal.
Rounding is half-up to the nearest cent.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 8500 -> '$85.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def percent_of(amount_cents: int, percent: int) -> int:
    """Return `percent`% of amount, rounded half-up to the cent.

    percent_of(10000, 85) == 8500
    percent_of(999, 95)   == 949   (949.05 -> 949)
    """
    if amount_cents < 0:
        raise ValueError(f"Amount must be non-negative, got {amount_cents}")
    return (amount_cents * percent + 50) // 100


def apply_rate_bps(amount_cents: int, rate_bps: int) -> int:
    """Apply a basis-point rate, rounded half-up: (a * bps + 5000) // 10000."""
    if amount_cents < 0:
        raise ValueError(f"Amount must be non-negative, got {amount_cents}")
    if amount_cents == 0 or rate_bps == 0:
        return 0
    return (amount_cents * rate_bps + 5000) // 10000
