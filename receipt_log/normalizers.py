"""Value normalizers for receipt log fields.

Each function turns one raw property value into its canonical
text form: dates as YYYY-MM-DD, money as 2-decimal strings.
"""

import logging
import math
from datetime import datetime, timezone

from .errors import ReceiptParseError

logger = logging.getLogger(__name__)


def parse_unixtime(unixtime: str) -> str:
    """Convert an epoch-millisecond timestamp to a UTC date.

    Args:
        unixtime: Milliseconds since the epoch, as text.

    Returns:
        The date as YYYY-MM-DD, or an empty string if the value
        cannot be parsed.
    """
    unixtime = unixtime.strip()
    # chop off the milliseconds
    seconds = unixtime[:-3]
    try:
        moment = datetime.fromtimestamp(int(seconds), tz=timezone.utc)
    except (ValueError, OverflowError, OSError) as e:
        logger.warning(f"Error parsing Unix time {unixtime!r}: {e}")
        return ''
    return moment.strftime('%Y-%m-%d')


def clean_total(total: str) -> str:
    """Normalize a currency-formatted total.

    Removes currency symbols and thousands separators and pads the
    fraction to two digits.

    Args:
        total: Raw total, e.g. "$1,234.5".

    Returns:
        Canonical total, e.g. "1234.50". Empty input gives ".00".
    """
    total = total.replace('$', '').replace(',', '').strip()

    whole, point, fraction = total.partition('.')
    if not point:
        return total + '.00'
    if len(fraction) < 2:
        return f"{whole}.{fraction.ljust(2, '0')}"
    return total


def parse_price(price: str) -> str:
    """Convert a cents-integer price to a 2-decimal string.

    Args:
        price: Price in cents, e.g. "990". May carry a "$" sign.

    Returns:
        The price in currency units, e.g. "9.90". Empty input gives "0.00".

    Raises:
        ReceiptParseError: If the price is not a number.
    """
    price = price.strip().replace('$', '')
    if not price:
        return '0.00'
    try:
        cents = float(price)
    except ValueError:
        raise ReceiptParseError(f"Cannot parse price: {price}")
    if not math.isfinite(cents):
        raise ReceiptParseError(f"Cannot parse price: {price}")
    return f"{cents / 100:.2f}"
