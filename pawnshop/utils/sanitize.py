import re
from typing import Any, Optional

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_PHONE_STRIP_RE = re.compile(r"[^\d+()\-\s]")


# Removes script blocks and html tags from free text input
def sanitize_string(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return _TAG_RE.sub("", _SCRIPT_RE.sub("", value)).strip()


# Keeps only digits, +, -, spaces and parentheses; None when too short to be a phone number
def sanitize_phone(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cleaned = _PHONE_STRIP_RE.sub("", value).strip()
    return cleaned if len(cleaned) >= 7 else None
