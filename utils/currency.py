from utils.constants import CURRENCY_SYMBOL


class AmountFormatError(ValueError):
    """Raised when typed input is not an acceptable whole amount."""


def format_currency(amount: int, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format whole currency units, e.g. 'NT$ 1,234'."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {abs(amount):,}"


def format_percent(ratio: float) -> str:
    return f"{ratio * 100:.0f}%"


def parse_amount(text: str, allow_zero: bool = False) -> int:
    """Parse user input into a whole amount, positive unless allow_zero.

    Thousands separators are accepted; decimals and signs are not.
    """
    raw = (text or "").strip().replace(",", "")
    if not (raw.isascii() and raw.isdigit()):
        raise AmountFormatError(f"'{text}' is not a whole amount.")
    value = int(raw)
    if value == 0 and allow_zero:
        return value
    if value <= 0:
        raise AmountFormatError("Amount must be greater than zero.")
    return value
