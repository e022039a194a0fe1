"""Normalization of untrusted import fields.

Each sanitizer takes one raw value. `sanitize_name` rejects bad input by
raising InvalidNameError; the optional fields degrade to None instead.
"""

import re
from enum import StrEnum
from typing import Any

from langmap.exceptions import ValidationError

MAX_LANGUAGE_NAME_LENGTH = 200

_WHITESPACE_RUN = re.compile(r"\s+")
_ISO_639_3 = re.compile(r"[a-z]{3}")
# Parameterized statements are the real injection defense; this only keeps
# obviously hostile names out of the catalogue.
_SUSPICIOUS_PATTERN = re.compile(r"[';]|--|/\*|\*/|xp_| or | and ", re.IGNORECASE)


class NameRejection(StrEnum):
    empty_input = "empty_input"
    too_long = "too_long"
    suspicious_pattern = "suspicious_pattern"


class InvalidNameError(ValidationError):
    def __init__(self, reason: NameRejection, message: str):
        self.reason = reason
        super().__init__(message)


def _normalize_whitespace(value: str) -> str:
    return _WHITESPACE_RUN.sub(" ", value.strip())


def sanitize_name(raw: Any) -> str:
    if not raw or not isinstance(raw, str):
        raise InvalidNameError(
            NameRejection.empty_input, "Language name must be a non-empty string"
        )

    name = _normalize_whitespace(raw)
    if not name:
        raise InvalidNameError(NameRejection.empty_input, "Language name cannot be empty")

    if len(name) > MAX_LANGUAGE_NAME_LENGTH:
        raise InvalidNameError(
            NameRejection.too_long,
            f"Language name exceeds maximum length ({MAX_LANGUAGE_NAME_LENGTH} characters)",
        )

    if _SUSPICIOUS_PATTERN.search(name):
        raise InvalidNameError(
            NameRejection.suspicious_pattern,
            "Language name contains invalid characters or patterns",
        )

    return name


def sanitize_iso_code(raw: Any) -> str | None:
    if not raw or not isinstance(raw, str):
        return None

    code = raw.strip().lower()
    if not _ISO_639_3.fullmatch(code):
        return None
    return code


def sanitize_endonym(raw: Any) -> str | None:
    if not raw or not isinstance(raw, str):
        return None

    endonym = _normalize_whitespace(raw)
    if not endonym or len(endonym) > MAX_LANGUAGE_NAME_LENGTH:
        return None
    return endonym
