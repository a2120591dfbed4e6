"""API key extraction from the Authorization header.

Accepted form (exact, case-sensitive scheme):
    Authorization: ApiKey <key>

Only the first Authorization value is considered. Failures raise an
AuthHeaderError subclass whose ``kind`` tells the caller which check failed.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any

AUTH_HEADER = "Authorization"
SCHEME = "ApiKey"


class AuthErrorKind(enum.Enum):
    NO_AUTH_HEADER = "no authorization header included"
    MALFORMED_HEADER = "malformed authorization header"

    @property
    def message(self) -> str:
        return self.value


class AuthHeaderError(Exception):
    """Base for Authorization header failures.

    A new instance is raised per call; ``kind`` is the stable identity, so
    callers compare ``exc.kind is AuthErrorKind.NO_AUTH_HEADER``. Instances
    of the same kind also compare equal.
    """

    kind: AuthErrorKind

    def __init__(self) -> None:
        super().__init__(self.kind.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthHeaderError):
            return NotImplemented
        return self.kind is other.kind

    def __hash__(self) -> int:
        return hash(self.kind)


class NoAuthHeaderError(AuthHeaderError):
    kind = AuthErrorKind.NO_AUTH_HEADER


class MalformedHeaderError(AuthHeaderError):
    kind = AuthErrorKind.MALFORMED_HEADER


def first_header_value(headers: Mapping[str, Any], name: str) -> str | None:
    """Return the first value of ``name``, matching the field name case-insensitively.

    Works with plain dicts (values may be a string or a list of strings) and
    with multi-dicts whose ``items()`` repeats a name once per value.
    """
    wanted = name.lower()
    for field, value in headers.items():
        if field.lower() != wanted:
            continue
        if isinstance(value, str):
            return value
        for item in value:
            return item
        return None
    return None


def get_api_key(headers: Mapping[str, Any]) -> str:
    """Extract the API key from request headers.

    Raises NoAuthHeaderError when the header is missing or empty and
    MalformedHeaderError when it is not exactly ``ApiKey <key>``.
    """
    auth = first_header_value(headers, AUTH_HEADER)
    if not auth:
        raise NoAuthHeaderError()

    parts = auth.split(" ")
    if len(parts) != 2:
        raise MalformedHeaderError()
    scheme, key = parts
    # str.split() on the key catches tabs and other non-space whitespace
    if scheme != SCHEME or not key or key.split() != [key]:
        raise MalformedHeaderError()
    return key
