"""Data normalization utilities for client contact details."""

import re
from typing import Optional


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize email to lowercase.

    Args:
        email: Raw email input

    Returns:
        Lowercased email or None if empty
    """
    if not email:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize name by stripping whitespace and collapsing multiple spaces.

    Args:
        name: Raw name input

    Returns:
        Cleaned name or None if empty
    """
    if not name:
        return None
    cleaned = " ".join(name.split())
    return cleaned or None


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Strip spaces, dots, dashes and brackets from a phone number, keeping a leading +."""
    if not phone:
        return None
    cleaned = phone.strip()
    prefix = "+" if cleaned.startswith("+") else ""
    digits = re.sub(r"[\s().\-]", "", cleaned.lstrip("+"))
    if not digits:
        return None
    return f"{prefix}{digits}"
