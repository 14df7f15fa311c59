# Overview: Arabic-locale display formatting for numbers, money and percentages.

from __future__ import annotations

from decimal import Context, Decimal, ROUND_HALF_UP

from ..validation import coerce_numeric

"""
Arabic Number Formatting (authoritative)

- Invalid input (None, NaN, infinities, non-numeric strings) formats as zero.
- An unusable decimals argument falls back to 2 places; the count is clamped
  to 0..100 and truncated to a whole number.
- Rounding matches fixed-decimal formatting of the stored binary float:
  exact ties round away from zero, everything else to the nearest value.
- Thousands mark U+066C every 3 characters of the integer part counted from
  the right, decimal mark U+066B, then ASCII digits are mapped to
  Eastern Arabic digits.
- The grouping walk counts the leading '-' as a character, so -100 becomes
  "-٬١٠٠". This is long-standing output and is kept as-is.
"""

DEFAULT_CURRENCY = "ج.م"

THOUSANDS_SEPARATOR = "\u066c"
DECIMAL_SEPARATOR = "\u066b"
MAX_DECIMALS = 100

ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


def _to_fixed(num: float, decimals: int) -> str:
    quantum = Decimal(1).scaleb(-decimals)
    # Enough precision for any finite float written out in full
    context = Context(prec=330 + decimals)
    text = format(Decimal(num).quantize(quantum, rounding=ROUND_HALF_UP, context=context), "f")
    # Negative zero only keeps its sign when the value itself was below zero
    if num >= 0 and text.startswith("-"):
        text = text[1:]
    return text


def _group_thousands(integer_part: str) -> str:
    out = []
    for j, ch in enumerate(reversed(integer_part)):
        if j > 0 and j % 3 == 0:
            out.append(THOUSANDS_SEPARATOR)
        out.append(ch)
    return "".join(reversed(out))


def _decimal_places(decimals) -> int:
    return int(min(max(coerce_numeric(decimals, 2), 0), MAX_DECIMALS))


def format_arabic_number(value, decimals: int = 2) -> str:
    decimals = _decimal_places(decimals)
    num = coerce_numeric(value)

    fixed = _to_fixed(num, decimals)
    integer_part, _, decimal_part = fixed.partition(".")

    result = _group_thousands(integer_part)
    if decimal_part:
        result = result + DECIMAL_SEPARATOR + decimal_part

    return result.translate(ARABIC_DIGITS)


def format_currency(amount, currency: str = DEFAULT_CURRENCY, decimals: int = 2) -> str:
    label = "" if currency is None else str(currency)
    return format_arabic_number(amount, decimals) + " " + label


def format_percentage(value) -> str:
    return format_arabic_number(value, 2) + "%"
