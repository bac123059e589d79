"""Shared parsing helpers for runtime, config, and request value normalization."""

from __future__ import annotations


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def normalize_language_code(value: object) -> str | None:
    """Normalize a language code to its stripped lowercase form."""

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None
    return normalized.lower()


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_language_list(value: object) -> tuple[str, ...]:
    """Parse a comma-separated string or sequence into normalized language codes."""

    if value is None:
        return ()
    if isinstance(value, str):
        raw_items: list[object] = list(value.split(","))
    elif isinstance(value, list | tuple):
        raw_items = list(value)
    else:
        raise ValueError("Language list must be a comma-separated string or a list.")

    languages: list[str] = []
    for item in raw_items:
        code = normalize_language_code(item)
        if code is not None and code not in languages:
            languages.append(code)
    return tuple(languages)
