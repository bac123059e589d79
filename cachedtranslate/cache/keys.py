"""Deterministic cache key builders for translation entries.

Responsibilities:
- Build content-hash keys from source text and target language.
- Build resource keys from resource type/id/field and target language.
- Decide which key scheme applies to one request.

Key namespaces never collide: hash keys start with `hash:` and resource keys
start with `res:`. Resource key components are escaped so that `:` inside a
component cannot produce an ambiguous key.
"""

from __future__ import annotations

from hashlib import sha256

from ..parsing import normalize_optional_string


HASH_KEY_PREFIX = "hash"
RESOURCE_KEY_PREFIX = "res"
_KEY_DELIMITER = ":"


def hash_text(text: str) -> str:
    """Return the SHA-256 hex digest of the UTF-8 encoded text."""

    return sha256(text.encode("utf-8")).hexdigest()


def _escape_component(value: str) -> str:
    """Escape the delimiter and the escape character inside one key component."""

    return value.replace("%", "%25").replace(_KEY_DELIMITER, "%3A")


def hash_key(text: str, target_language: str) -> str:
    """Build a content-hash cache key for text translated into a target language."""

    return _KEY_DELIMITER.join(
        (HASH_KEY_PREFIX, hash_text(text), _escape_component(target_language))
    )


def resource_key(
    resource_type: str,
    resource_id: str,
    field: str,
    target_language: str,
) -> str:
    """Build a resource-scoped cache key for one field of one resource."""

    return _KEY_DELIMITER.join(
        (
            RESOURCE_KEY_PREFIX,
            _escape_component(resource_type),
            _escape_component(resource_id),
            _escape_component(field),
            _escape_component(target_language),
        )
    )


def has_resource_info(
    resource_type: str | None,
    resource_id: str | None,
    field: str | None,
) -> bool:
    """Return `True` only when resource type, id, and field are all non-blank.

    Partial resource info is treated as no resource info, which makes the
    request fall back to the content-hash key.
    """

    return all(
        normalize_optional_string(value) is not None
        for value in (resource_type, resource_id, field)
    )


def cache_key_for(
    text: str,
    target_language: str,
    resource_type: str | None = None,
    resource_id: str | None = None,
    field: str | None = None,
) -> str:
    """Return the resource key when resource info is complete, else the hash key."""

    if has_resource_info(resource_type, resource_id, field):
        return resource_key(
            str(resource_type),
            str(resource_id),
            str(field),
            target_language,
        )
    return hash_key(text, target_language)
