"""
Walidatory i normalizatory danych.
NIP, kod pocztowy, telefon, email - polskie standardy.
"""

import re
from typing import Optional

# Wagi dla sumy kontrolnej NIP
NIP_WEIGHTS = (6, 5, 7, 2, 3, 4, 5, 6, 7)

# Tylko cyfry ASCII - "\d" w Pythonie łapie też cyfry Unicode
NIP_PATTERN = re.compile(r"^[0-9]{10}$")
NIP_SEPARATORS = re.compile(r"[\s-]")

POSTAL_CODE_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{3}$")
PHONE_PATTERN = re.compile(r"^(\+48)?[\s-]?[0-9]{3}[\s-]?[0-9]{3}[\s-]?[0-9]{3}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def clean_nip(nip: Optional[str]) -> str:
    """
    Usuwa białe znaki i myślniki z NIP.

    Args:
        nip: NIP w dowolnym formacie (np. "526-000-12-46", " 526 000 12 46 ")

    Returns:
        NIP bez separatorów (może nadal nie być poprawny)
    """
    if not isinstance(nip, str):
        return ""
    return NIP_SEPARATORS.sub("", nip)


def is_valid_nip(nip: Optional[str]) -> bool:
    """
    Sprawdza poprawność NIP (suma kontrolna MOD 11).

    Args:
        nip: NIP - 10 cyfr, może zawierać spacje i myślniki

    Returns:
        True jeśli NIP jest poprawny
    """
    cleaned = clean_nip(nip)
    if not NIP_PATTERN.match(cleaned):
        return False

    digits = [int(d) for d in cleaned]
    checksum = sum(d * w for d, w in zip(digits[:9], NIP_WEIGHTS)) % 11

    # Suma kontrolna nie może być 10
    if checksum == 10:
        return False

    return checksum == digits[9]


def format_nip(nip: Optional[str]) -> Optional[str]:
    """
    Formatuje NIP do postaci XXX-XXX-XX-XX.
    Nie sprawdza sumy kontrolnej.

    Args:
        nip: NIP - 10 cyfr

    Returns:
        Sformatowany NIP lub oryginalna wartość jeśli to nie jest 10 cyfr
    """
    cleaned = clean_nip(nip)
    if not NIP_PATTERN.match(cleaned):
        return nip

    return f"{cleaned[:3]}-{cleaned[3:6]}-{cleaned[6:8]}-{cleaned[8:10]}"


def format_postal_code(value: Optional[str]) -> str:
    """
    Auto-formatuje kod pocztowy w trakcie wpisywania: myślnik po 2 cyfrach.

    Examples:
        "00001" -> "00-001"
        "00-0" -> "00-0"
        "0" -> "0"
    """
    if not value:
        return ""

    digits = "".join(c for c in value if c in "0123456789")[:5]
    if len(digits) > 2:
        return f"{digits[:2]}-{digits[2:]}"
    return digits


def is_valid_postal_code(value: Optional[str]) -> bool:
    """Kod pocztowy w formacie XX-XXX."""
    if not value:
        return False
    return bool(POSTAL_CODE_PATTERN.match(value.strip()))


def is_valid_phone(phone: Optional[str]) -> bool:
    """
    Walidacja polskiego numeru telefonu.
    Akceptuje "+48 123 456 789", "123-456-789", "123456789".
    """
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(phone.strip()))


def is_valid_email(email: Optional[str]) -> bool:
    """
    Podstawowa walidacja adresu email.

    Args:
        email: Adres email

    Returns:
        True jeśli email wygląda na poprawny
    """
    if not email:
        return False

    # Prosty regex - nie próbujemy być zbyt restrykcyjni
    return bool(EMAIL_PATTERN.match(email.strip()))


def escape_html(value: Optional[str]) -> str:
    """Koduje tekst użytkownika wstawiany do treści HTML maila."""
    if not value:
        return ""
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )
