"""Display formatting helpers (Brazilian conventions)."""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[int, float, Decimal]


def format_currency(value: Optional[Number], fallback: str = "R$ 0,00") -> str:
    """
    Format a value as Brazilian reais, e.g. ``R$ 1.234,56``.

    Non-numeric, NaN or missing values return ``fallback``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return fallback
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return fallback
    if isinstance(value, Decimal) and not value.is_finite():
        return fallback
    try:
        amount = Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation:
        return fallback

    sign = "-" if amount < 0 else ""
    # en-US grouping then swap separators: 1,234.56 -> 1.234,56
    formatted = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {formatted}"


def format_phone(value: str) -> str:
    """Progressively mask up to 11 digits as ``(11) 9999-9999`` / ``(11) 99999-9999``."""
    if not value:
        return ""
    digits = re.sub(r"\D", "", value)[:11]
    if len(digits) <= 2:
        return f"({digits}"
    if len(digits) <= 6:
        return f"({digits[:2]}) {digits[2:]}"
    if len(digits) <= 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
