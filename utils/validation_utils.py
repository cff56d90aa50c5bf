"""
utils/validation_utils.py

Purpose: Input validation

- Amount cleaning and range checks
- Phone number format and normalization
- Quick-entry parsing ("amount description category")
- Input sanitization
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable, Optional

from app.core.config import settings


AMOUNT_SEPARATORS = re.compile(r"[\s.,]")
DIGITS_ONLY = re.compile(r"^\d+$")


def clean_amount(text: str) -> str:
    """
    Removes whitespace, dots and commas used as grouping separators.

    Example: "1.400.000" -> "1400000"
    """
    if not text:
        return ""
    return AMOUNT_SEPARATORS.sub("", text)


def is_valid_amount(
    text: str,
    min_amount: Optional[int] = None,
    max_amount: Optional[int] = None
) -> bool:
    """
    Validates a monetary amount typed by the user.

    Accepts any mixture of '.', ',' and spaces as grouping separators.
    The cleaned value must be all digits and fall within the configured
    inclusive range.

    Args:
        text: Raw user input
        min_amount: Lower bound, defaults to settings.MIN_AMOUNT
        max_amount: Upper bound, defaults to settings.MAX_AMOUNT

    Returns:
        True if the amount is acceptable
    """
    cleaned = clean_amount(text)
    if not DIGITS_ONLY.match(cleaned):
        return False

    lower = settings.MIN_AMOUNT if min_amount is None else min_amount
    upper = settings.MAX_AMOUNT if max_amount is None else max_amount

    return lower <= int(cleaned) <= upper


def parse_amount(text: str) -> int:
    """
    Converts a validated amount string to an integer.

    Raises:
        ValueError: If the text has no digits left after cleaning
    """
    cleaned = clean_amount(text)
    if not DIGITS_ONLY.match(cleaned):
        raise ValueError(f"Not an amount: {text!r}")
    return int(cleaned)


def strip_transport_prefix(sender: str) -> str:
    """Twilio sends 'whatsapp:+549...'; the ledger stores '+549...'."""
    if not sender:
        return ""
    return sender.replace("whatsapp:", "").strip()


def phone_key(phone: str) -> str:
    """
    Comparison key for phone numbers: digits only.

    '+54 9 11 2345-6789', 'whatsapp:+5491123456789' and '5491123456789'
    all map to the same key.
    """
    return re.sub(r"\D", "", strip_transport_prefix(phone or ""))


def normalize_phone(phone: str) -> str:
    """Canonical storage form: '+' followed by digits."""
    digits = phone_key(phone)
    return f"+{digits}" if digits else ""


def validate_phone_number(phone: str) -> bool:
    """
    Validates an international phone number.

    Separators (spaces, dashes, parentheses) are ignored. The remaining
    number may start with '+' and must hold 10 to 15 digits.

    Args:
        phone: Phone number string

    Returns:
        True if the format is acceptable
    """
    if not phone:
        return False

    phone = re.sub(r"[\s\-\(\)]", "", strip_transport_prefix(phone))

    return bool(re.match(r"^\+?\d{10,15}$", phone))


def sanitize_input(text: str, max_length: int = 200) -> str:
    """
    Sanitizes free text before it is written to the spreadsheet.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]

    # Sheets would evaluate these as formulas
    text = text.lstrip("=+@")

    text = re.sub(r"[<>{}\[\]]", "", text)

    # Normalize whitespace
    text = " ".join(text.split())

    return text.strip()


def fold_text(text: str) -> str:
    """
    Lowercases and removes accents so 'Menú' and 'menu' compare equal.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text.strip().casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


# ============================================================
# QUICK EXPENSE ENTRY
# ============================================================

class QuickEntryError(ValueError):
    """
    Raised when a quick expense line cannot be parsed.

    `kind` is one of: "format", "amount", "description", "category".
    """

    def __init__(self, kind: str, message: str = ""):
        self.kind = kind
        super().__init__(message or kind)


@dataclass(frozen=True)
class QuickEntry:
    amount: int
    description: str
    category: str


def looks_like_quick_entry(text: str) -> bool:
    """A menu message is treated as a quick entry when it starts with a number and has more words."""
    tokens = (text or "").split()
    return len(tokens) > 1 and bool(DIGITS_ONLY.match(clean_amount(tokens[0])))


def parse_quick_entry(text: str, categories: Iterable[str]) -> QuickEntry:
    """
    Parses "<amount> <description...> <category>".

    The first token is the amount, the last token is the category and
    everything in between is joined back into the description.

    Args:
        text: Raw user input
        categories: Allowed category names (already folded)

    Returns:
        Parsed QuickEntry

    Raises:
        QuickEntryError: With kind "format", "amount", "description" or "category"
    """
    tokens = (text or "").split()
    if len(tokens) < 3:
        raise QuickEntryError("format", "Expected '<amount> <description> <category>'")

    amount_token, *middle, category_token = tokens

    if not is_valid_amount(amount_token):
        raise QuickEntryError("amount", f"Invalid amount: {amount_token!r}")

    description = sanitize_input(" ".join(middle))
    if len(description) < 2:
        raise QuickEntryError("description", "Description too short")

    category = fold_text(category_token)
    if category not in set(categories):
        raise QuickEntryError("category", f"Unknown category: {category_token!r}")

    return QuickEntry(
        amount=parse_amount(amount_token),
        description=description,
        category=category,
    )
