"""Shared validation utilities"""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Country code -> IBAN length for the countries applicants actually use
IBAN_LENGTHS = {
    "AT": 20,
    "BE": 16,
    "CH": 21,
    "DE": 22,
    "DK": 18,
    "ES": 24,
    "FR": 27,
    "GB": 22,
    "IT": 27,
    "LU": 20,
    "NL": 18,
    "PL": 28,
}


def is_valid_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase, stripped email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Ungültige E-Mail-Adresse")

    return email


def normalize_iban(iban: str) -> str:
    return re.sub(r"\s+", "", iban or "").upper()


def validate_iban(iban: Optional[str]) -> str:
    """
    Validate an IBAN with the ISO 13616 mod-97 checksum.

    Returns:
        IBAN without whitespace, uppercased

    Raises:
        ValueError: If the IBAN is malformed or the checksum fails
    """
    value = normalize_iban(iban or "")

    if not re.match(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{10,30}$", value):
        raise ValueError("Ungültige IBAN")

    expected_length = IBAN_LENGTHS.get(value[:2])
    if expected_length and len(value) != expected_length:
        raise ValueError("Ungültige IBAN")

    rearranged = value[4:] + value[:4]
    numeric = "".join(str(int(ch, 36)) for ch in rearranged)
    if int(numeric) % 97 != 1:
        raise ValueError("Ungültige IBAN")

    return value


def validate_bic(bic: Optional[str]) -> Optional[str]:
    if not bic:
        return None
    value = bic.strip().upper()
    if not re.match(r"^[A-Z]{4}[A-Z]{2}[A-Z0-9]{2}([A-Z0-9]{3})?$", value):
        raise ValueError("Ungültige BIC")
    return value
