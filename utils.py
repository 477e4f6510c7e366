"""
Price text helpers.

Vietnamese retailers print prices in several formats ("10.710.000₫",
"18,825,000₫", "8.100,50đ"). The separators are resolved by looking at which
ones occur in the text rather than by locale.
"""
import re
import math
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)

PLAUSIBLE_PRICE_THRESHOLD = 100_000

NOT_AVAILABLE_TEXTS = ("Không có", "Không hiển thị")

_CURRENCY_AND_SPACE = re.compile(r"[₫đĐ\s]")
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_price(price_text) -> Optional[Union[int, float]]:
    """
    Parse a price string into a number.

    Returns None for missing text, "not available" sentinels, unparseable
    text and non-positive values. Whole amounts come back as int. Strings are
    read as display text ("1.710.000" is 1710000); int and float inputs are
    taken as values.

    >>> parse_price("10.710.000₫")
    10710000
    >>> parse_price("8.100,50đ")
    8100.5
    """
    if price_text is None:
        return None

    # numbers are taken as values, not as display text
    if isinstance(price_text, (int, float)) and not isinstance(price_text, bool):
        if not math.isfinite(price_text) or price_text <= 0:
            return None
        if isinstance(price_text, float) and price_text.is_integer():
            return int(price_text)
        return price_text

    text = str(price_text).strip()
    if not text or text in NOT_AVAILABLE_TEXTS:
        return None

    clean = _CURRENCY_AND_SPACE.sub("", text)

    if "." in clean and "," in clean:
        # 1.234,56 -> dots are thousands, comma is the decimal point
        clean = clean.replace(".", "").replace(",", ".", 1)
    elif "." in clean:
        # 10.710.000 -> no fractional dong
        clean = clean.replace(".", "")
    elif "," in clean:
        # 18,825,000
        clean = clean.replace(",", "")

    match = _LEADING_NUMBER.match(clean)
    if not match:
        logger.debug("Could not parse price: %r", price_text)
        return None

    price = float(match.group(0))
    if not math.isfinite(price) or price <= 0:
        logger.debug("Could not parse price: %r", price_text)
        return None

    if price.is_integer():
        price = int(price)

    logger.debug("Price parsed: %r -> %s", price_text, price)
    return price


def is_plausible_price(price) -> bool:
    """Prices at or below the threshold are treated as stray numbers, not prices."""
    return price is not None and math.isfinite(price) and price > PLAUSIBLE_PRICE_THRESHOLD


def format_vnd(price: Union[int, float]) -> str:
    """Format a number the way Vietnamese sites display it: 1710000 -> '1.710.000₫'."""
    whole, _, fraction = f"{price:.3f}".partition(".")
    fraction = fraction.rstrip("0")

    text = f"{int(whole):,}".replace(",", ".")
    if fraction:
        text += "," + fraction
    return text + "₫"
