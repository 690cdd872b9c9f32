import re

# Simple, pragmatic patterns
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_SLUG_RE = re.compile(r"^[a-z0-9-]+$")

SLUG_MIN_LEN = 3
SLUG_MAX_LEN = 100
BOARD_NAME_MIN_LEN = 3
BOARD_NAME_MAX_LEN = 255
TITLE_MIN_LEN = 5
TITLE_MAX_LEN = 255
DESCRIPTION_MIN_LEN = 10
EMAIL_MAX_LEN = 320


def text_or_none(val):
    """JSON bodies are untyped: only real strings count as text."""
    return val if isinstance(val, str) else None


def clean_str(val):
    """
    Collapse whitespace and trim. Returns None if empty after cleaning or not a string.
    Length limits are the caller's check; nothing is truncated here.
    """
    val = text_or_none(val)
    if val is None:
        return None
    s = re.sub(r"\s+", " ", val).strip()
    return s or None


def clean_text(val):
    """Trim only; keeps inner newlines for descriptions and comments."""
    val = text_or_none(val)
    if val is None:
        return ""
    return val.strip()


def is_valid_email(val) -> bool:
    if not isinstance(val, str) or not val or len(val) > EMAIL_MAX_LEN:
        return False
    return bool(_EMAIL_RE.match(val))


def slug_error(val):
    if not isinstance(val, str) or len(val) < SLUG_MIN_LEN:
        return f"Slug must be at least {SLUG_MIN_LEN} characters"
    if len(val) > SLUG_MAX_LEN:
        return f"Slug must be {SLUG_MAX_LEN} characters or less"
    if not _SLUG_RE.match(val):
        return "Slug must contain only lowercase letters, numbers, and hyphens"
    return None


def as_bool(val, default: bool = False) -> bool:
    """Strict-ish bool coercion for JSON bodies; None -> default."""
    if val is None:
        return default
    if isinstance(val, bool):
        return val
    if isinstance(val, (int, float)):
        return bool(val)
    return str(val).strip().lower() in ("1", "true", "yes", "on")
