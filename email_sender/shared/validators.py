"""Shared validation utilities"""

import re
from typing import Optional

from ..config import ALLOWED_ATTACHMENT_EXTENSIONS, MAX_ATTACHMENT_SIZE

# Loose pattern: something@something.something with no whitespace
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: Optional[str]) -> bool:
    """Check an address against the recipient pattern"""
    if not email:
        return False
    return EMAIL_PATTERN.match(email) is not None


def validate_email(email: Optional[str]) -> str:
    """
    Validate a recipient address.

    Args:
        email: Email address string

    Returns:
        The address, stripped of surrounding whitespace

    Raises:
        ValueError: If the address is empty or does not look like an email
    """
    email = (email or "").strip()

    if not is_valid_email(email):
        raise ValueError("Invalid email address")

    return email


def clean_header(value: Optional[str]) -> str:
    """Collapse CR/LF runs to single spaces so the value fits on one header line"""
    return re.sub(r"[\r\n]+", " ", value or "").strip()


def is_allowed_attachment(filename: Optional[str]) -> bool:
    """Check the filename extension against the attachment allow-list"""
    if not filename:
        return False
    return filename.lower().endswith(ALLOWED_ATTACHMENT_EXTENSIONS)


def validate_attachment(filename: Optional[str], size: int) -> str:
    """
    Validate one uploaded attachment.

    Args:
        filename: Original filename as sent by the browser
        size: Size of the file contents in bytes

    Returns:
        The filename

    Raises:
        ValueError: If the file is too large or its type is not allowed
    """
    if size > MAX_ATTACHMENT_SIZE:
        raise ValueError(f"File {filename} is too large. Maximum size is 10MB")

    if not is_allowed_attachment(filename):
        raise ValueError(f"File type not allowed: {filename}")

    return filename
