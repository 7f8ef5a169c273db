"""Star count formatting for display badges."""

from decimal import ROUND_HALF_UP, Decimal

from ghstars.config.stars import STARS_PLACEHOLDER, NumberFormat

_ONE_DECIMAL = Decimal("0.1")
_WHOLE = Decimal("1")


def _scaled(num: int, divisor: int, places: Decimal) -> str:
    """num / divisor rounded half-up to the given precision."""
    return str((Decimal(num) / divisor).quantize(places, rounding=ROUND_HALF_UP))


def format_number(num: int, mode: NumberFormat | str = NumberFormat.ABBREVIATED) -> str:
    """
    Format a star count with thousands separators or as an abbreviation.

    Abbreviated:
        999 -> "999", 1234 -> "1.2k", 45678 -> "46k", 2500000 -> "2.5M"
    Full:
        1234 -> "1,234"
    """
    if NumberFormat(mode) is NumberFormat.FULL or num < 1000:
        return f"{num:,}"
    if num < 10_000:
        return _scaled(num, 1000, _ONE_DECIMAL) + "k"
    if num < 1_000_000:
        return _scaled(num, 1000, _WHOLE) + "k"
    return _scaled(num, 1_000_000, _ONE_DECIMAL) + "M"


def format_star_count(
    stars: int,
    mode: NumberFormat | str = NumberFormat.ABBREVIATED,
    template: str = "⭐ {stars}",
) -> str:
    """Substitute the formatted count for the first {stars} in template."""
    return template.replace(STARS_PLACEHOLDER, format_number(stars, mode), 1)
