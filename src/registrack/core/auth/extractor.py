"""Session payload extraction.

Authentication endpoints do not agree on a response shape: the token
and the user may sit at the top level or under `data`, `payload` or
`result`, and under several key names. This module locates them using
ordered alias tables so the precedence is data, not control flow.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

# Candidate containers, in priority order. None means the raw object itself.
CANDIDATE_KEYS: tuple[str | None, ...] = (None, "data", "payload", "result")

TOKEN_ALIASES: tuple[str, ...] = ("token", "accessToken")

USER_ALIASES: tuple[str, ...] = ("usuario", "user", "usuarioData", "userData")


class ExtractionPath(str, Enum):
    """Which search produced an extraction result."""

    STRICT = "strict"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ExtractedAuth:
    """Token and user located in an authentication response.

    Attributes:
        token: Bearer token, or None if not found.
        user: Raw user object, or None if not found.
        path: STRICT when both came from the same candidate object,
            FALLBACK when they were searched independently.
        source: Candidate key the strict pair came from ("" for the root).
    """

    token: str | None
    user: dict[str, Any] | None
    path: ExtractionPath
    source: str | None = None

    @property
    def is_complete(self) -> bool:
        """Whether both halves were found."""
        return self.token is not None and self.user is not None


def candidate_sources(raw: Any) -> list[tuple[str, Mapping[str, Any]]]:
    """List the objects that may hold the token and user, in priority order."""
    if not isinstance(raw, Mapping):
        return []

    sources: list[tuple[str, Mapping[str, Any]]] = []
    for key in CANDIDATE_KEYS:
        candidate = raw if key is None else raw.get(key)
        if isinstance(candidate, Mapping):
            sources.append((key or "", candidate))
    return sources


def find_token(source: Mapping[str, Any]) -> str | None:
    """Return the first non-empty string under a token alias."""
    for alias in TOKEN_ALIASES:
        value = source.get(alias)
        if isinstance(value, str) and value:
            return value
    return None


def find_user(source: Mapping[str, Any]) -> dict[str, Any] | None:
    """Return the first object under a user alias."""
    for alias in USER_ALIASES:
        value = source.get(alias)
        if isinstance(value, Mapping):
            return dict(value)
    return None


def extract_auth_payload(raw: Any) -> ExtractedAuth:
    """Locate the token and user in an authentication response.

    The first candidate that holds both a token and a user wins, so a
    token is never paired with a user from a different object. Only when
    no candidate holds a complete pair are the halves searched for
    independently. Never raises.

    Args:
        raw: Decoded JSON body of an authentication endpoint.

    Returns:
        The extraction result; missing halves are None.
    """
    sources = candidate_sources(raw)

    for key, source in sources:
        token = find_token(source)
        user = find_user(source)
        if token is not None and user is not None:
            return ExtractedAuth(
                token=token,
                user=user,
                path=ExtractionPath.STRICT,
                source=key,
            )

    token = next((t for _, s in sources if (t := find_token(s)) is not None), None)
    user = next((u for _, s in sources if (u := find_user(s)) is not None), None)
    return ExtractedAuth(token=token, user=user, path=ExtractionPath.FALLBACK)
