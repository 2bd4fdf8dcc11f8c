# storefront/utils/money.py
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

MINOR_PER_MAJOR = 100
CURRENCY_CODE = "NGN"
CURRENCY_SYMBOL = "₦"

_ONE = Decimal("1")
_SYMBOLS_RE = re.compile(r"[₦,\s]")
_ALLOWED_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
_CODE_RE = re.compile(re.escape(CURRENCY_CODE), re.IGNORECASE)


def _as_decimal(amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    #floats go through str, otherwise 1299.99 becomes 1299.98999...
    return Decimal(str(amount))


def to_minor_units(major) -> int:
    """Naira -> kobo. Half rounds away from zero (ROUND_HALF_UP in decimal)."""
    minor = (_as_decimal(major) * MINOR_PER_MAJOR).quantize(_ONE, rounding=ROUND_HALF_UP)
    return int(minor)


def to_major_units(minor: int) -> Decimal:
    """Kobo -> naira, for display only. Exact, never rounded."""
    return Decimal(int(minor)).scaleb(-2)


def format_price(
    minor: int,
    show_symbol: bool = True,
    show_currency: bool = False,
    decimals: int = 2,
) -> str:
    #format() alone would round half to even
    major = to_major_units(minor).quantize(_ONE.scaleb(-decimals), rounding=ROUND_HALF_UP)
    formatted = f"{major:,.{decimals}f}"

    if show_symbol:
        formatted = f"{CURRENCY_SYMBOL}{formatted}"

    if show_currency:
        formatted = f"{formatted} {CURRENCY_CODE}"

    return formatted


def parse_price(text: str) -> int:
    """User typed price (e.g. "₦1,299.99 NGN") -> kobo."""
    cleaned = _CODE_RE.sub("", _SYMBOLS_RE.sub("", text)).strip()

    #digits and one dot only, no "1_000", "1e3" or "Infinity"
    if not _ALLOWED_RE.match(cleaned):
        raise ValueError("Invalid price format")

    try:
        major = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError("Invalid price format") from None

    if not major.is_finite() or major < 0:
        raise ValueError("Invalid price format")

    return to_minor_units(major)
