import html
import re
from typing import Optional

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def escape_html(value: Optional[str]) -> str:
    """
    Escape HTML special characters before interpolating user data
    (recipient names, notes) into e-mail templates.
    """
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def clean_text(value: Optional[str], max_length: int = 500) -> Optional[str]:
    """
    Trim free-text input and drop control characters.

    Returns None for empty input.

    Raises:
        ValueError: If input exceeds max_length
    """
    if value is None:
        return None

    value = _CONTROL_CHARS.sub("", str(value)).strip()
    if not value:
        return None

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    return value
