"""
Digit helpers for Persian-facing text.

Dates typed on Persian keyboards arrive with Persian (۰-۹) or Arabic-Indic
(٠-٩) digits; labels shown back to the user use Persian digits.
"""
PERSIAN_DIGITS = "۰۱۲۳۴۵۶۷۸۹"
ARABIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"

_TO_ASCII = str.maketrans(PERSIAN_DIGITS + ARABIC_DIGITS, "0123456789" * 2)
_TO_PERSIAN = str.maketrans("0123456789", PERSIAN_DIGITS)


def to_ascii_digits(text: str) -> str:
    return text.translate(_TO_ASCII)


def to_persian_digits(value) -> str:
    """Render ``value`` with Persian digits; non-digit characters are kept."""
    return str(value).translate(_TO_PERSIAN)
