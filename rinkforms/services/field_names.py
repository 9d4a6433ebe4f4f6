from __future__ import annotations

import re
from collections.abc import Iterable

from rinkforms.services.form_errors import DuplicateNameError, InvalidCharactersError

_WHITESPACE_RE = re.compile(r"\s+")
_VALID_NAME_RE = re.compile(r"^[a-z0-9_]+$")


def normalize_field_name(name: str | None) -> str:
    """Turn every whitespace run, leading and trailing ones included, into ``_`` and lower-case."""
    return _WHITESPACE_RE.sub("_", str(name or "")).lower()


def validate_field_name(name: str | None, taken: Iterable[str] = (), field_id: str | None = None) -> str:
    normalized = normalize_field_name(name)
    if not _VALID_NAME_RE.fullmatch(normalized):
        raise InvalidCharactersError(normalized, field_id)
    if normalized in set(taken):
        raise DuplicateNameError(normalized, field_id)
    return normalized


def unique_field_name(base: str, taken: Iterable[str]) -> str:
    used = set(taken)
    candidate = normalize_field_name(base)
    if candidate not in used:
        return candidate
    suffix = 2
    while f"{candidate}_{suffix}" in used:
        suffix += 1
    return f"{candidate}_{suffix}"
