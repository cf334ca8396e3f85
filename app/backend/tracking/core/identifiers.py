"""Dual-form identifiers: bare integers and prefixed display codes (``PJT003``)."""

from __future__ import annotations

import re
from collections.abc import Iterable

from tracking.core.errors import InvalidIdentifierFormat

# Raw identifier as received at the API boundary.
Identifier = int | str

PROJECT_PREFIX = "PJT"
EMPLOYEE_PREFIX = "EMP"
MANAGER_PREFIX = "MAN"

PROJECT_PREFIXES = frozenset({PROJECT_PREFIX})
PERSON_PREFIXES = frozenset({EMPLOYEE_PREFIX, MANAGER_PREFIX})
NO_PREFIXES: frozenset[str] = frozenset()

CODE_WIDTH = 3

_DIGITS = re.compile(r"^[0-9]+$")


def _prefixed_pattern(prefixes: Iterable[str]) -> re.Pattern[str] | None:
    alternatives = "|".join(re.escape(prefix) for prefix in sorted(prefixes))
    if not alternatives:
        return None
    return re.compile(rf"^({alternatives})[0-9]+$")


def decode(raw: Identifier | None, expected_prefixes: Iterable[str] = NO_PREFIXES) -> int:
    """Return the numeric id behind ``raw``.

    Integers pass through untouched. Strings are trimmed and accepted either as
    plain digits or as one of ``expected_prefixes`` followed by digits.
    """

    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidIdentifierFormat(raw)

    value = raw.strip()
    if _DIGITS.match(value):
        return int(value)

    pattern = _prefixed_pattern(expected_prefixes)
    if pattern is not None and pattern.match(value):
        return int(re.sub(r"[^0-9]", "", value))

    raise InvalidIdentifierFormat(raw)


def encode(entity_id: int, prefix: str, width: int = CODE_WIDTH) -> str:
    """Format ``entity_id`` as ``prefix`` plus a zero-padded number (never truncated)."""

    return f"{prefix}{entity_id:0{width}d}"
