"""Money rounding, display formatting and parsing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

_CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """Round half-up to cents, avoiding binary float drift in the result."""

    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class MoneyFormat:
    """Locale conventions for rendering amounts."""

    symbol: str = "$"
    thousands: str = ","
    decimal: str = "."

    @classmethod
    def from_config(cls, config) -> "MoneyFormat":
        return cls(
            symbol=config.CURRENCY_SYMBOL,
            thousands=config.THOUSANDS_SEP,
            decimal=config.DECIMAL_SEP,
        )


DEFAULT_FORMAT = MoneyFormat()


def format_number(value: float, fmt: MoneyFormat = DEFAULT_FORMAT) -> str:
    """Grouped two-decimal rendering without a currency symbol."""

    rendered = f"{abs(round_money(value)):,.2f}"
    # Swap through a placeholder so "," and "." can trade places
    rendered = rendered.replace(",", "\0").replace(".", fmt.decimal).replace("\0", fmt.thousands)
    return f"-{rendered}" if value < 0 and round_money(value) != 0 else rendered


def format_currency(amount: float, fmt: MoneyFormat = DEFAULT_FORMAT) -> str:
    """Render ``amount`` as e.g. ``$1,234.50`` or ``-$20.00``."""

    body = format_number(abs(amount), fmt)
    sign = "-" if round_money(amount) < 0 else ""
    return f"{sign}{fmt.symbol}{body}"


def parse_number(text: str, fmt: MoneyFormat = DEFAULT_FORMAT) -> Optional[float]:
    """Parse user-entered numeric text; ``None`` when it is not a number."""

    if text is None:
        return None
    cleaned = str(text).strip().replace(" ", "")
    if not cleaned:
        return None
    negative = cleaned.startswith("-") or (cleaned.startswith("(") and cleaned.endswith(")"))
    cleaned = cleaned.strip("-()")
    if fmt.thousands:
        cleaned = cleaned.replace(fmt.thousands, "")
    if fmt.decimal != ".":
        cleaned = cleaned.replace(fmt.decimal, ".")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return float(-value if negative else value)


def parse_currency(text: str, fmt: MoneyFormat = DEFAULT_FORMAT) -> Optional[float]:
    """Inverse of :func:`format_currency`; accepts the symbol anywhere in the text."""

    if text is None:
        return None
    return parse_number(str(text).replace(fmt.symbol, ""), fmt)
