"""Unit tests for shared request and config parsing helpers."""

import pytest

from cachedtranslate.parsing import (
    normalize_language_code,
    normalize_optional_string,
    parse_language_list,
    parse_permissive_boolean,
)


def test_normalize_optional_string_handles_blank_values() -> None:
    """Normalization should return `None` for `None` and blank textual values."""

    assert normalize_optional_string(None) is None
    assert normalize_optional_string("") is None
    assert normalize_optional_string("   ") is None


def test_normalize_optional_string_strips_non_blank_values() -> None:
    """Normalization should return stripped content for non-empty values."""

    assert normalize_optional_string("  value  ") == "value"
    assert normalize_optional_string(42) == "42"


def test_normalize_language_code_lowercases() -> None:
    """Language codes should be stripped and lowercased."""

    assert normalize_language_code(" HE ") == "he"
    assert normalize_language_code("  ") is None


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("TrUe", True),
        ("  ON ", True),
        ("YeS", True),
        ("FALSE", False),
        (" oFf ", False),
        ("nO", False),
        (True, True),
        ("maybe", None),
        ("", None),
    ],
)
def test_parse_permissive_boolean_tokens(token: object, expected: bool | None) -> None:
    """Permissive parsing should accept mixed-case tokens and reject unknown ones."""

    assert parse_permissive_boolean(token) is expected


def test_parse_language_list_accepts_strings_and_sequences() -> None:
    """Language lists should normalize, drop blanks, and deduplicate in order."""

    assert parse_language_list(" he, EN ,, he") == ("he", "en")
    assert parse_language_list(["ar", "AR", "fr"]) == ("ar", "fr")
    assert parse_language_list(None) == ()


def test_parse_language_list_rejects_other_types() -> None:
    """Non-string, non-sequence values should raise `ValueError`."""

    with pytest.raises(ValueError):
        parse_language_list(5)
