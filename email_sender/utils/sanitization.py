import html
from typing import Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def text_to_html(value: Optional[str]) -> str:
    """Escape plain text and keep its line breaks as <br /> tags"""
    if not value:
        return ""
    escaped = sanitize_string(value.replace("\r\n", "\n"))
    return escaped.replace("\n", "<br />")
