"""Redaction of sensitive values before they reach the logs.

Request logging records query parameters. Any parameter whose name looks
like a credential is replaced with ``[REDACTED]``: names matching a built-in
pattern, plus the field names configured in ``LogConfig.sensitive_fields``.
Only the logged copy is changed.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from re import Pattern
from typing import Final

from baton.core.constants import REDACTED

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|auth|authorization|"
    r"credential|private[_-]?key|access[_-]?key|session|"
    r"ssn|pin|cvv|cvc|card[_-]?number)",
    re.IGNORECASE,
)


def is_sensitive_field(field_name: str, sensitive_fields: Iterable[str] = ()) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.
        sensitive_fields: Additional configured names, matched as substrings.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True
    field_lower = field_name.lower()
    return any(name.lower() in field_lower for name in sensitive_fields)


def sanitize_params(
    params: Mapping[str, str], sensitive_fields: Iterable[str] = ()
) -> dict[str, str]:
    """Return a copy of ``params`` with sensitive values redacted."""
    fields = tuple(sensitive_fields)
    return {
        key: REDACTED if is_sensitive_field(key, fields) else value
        for key, value in params.items()
    }

