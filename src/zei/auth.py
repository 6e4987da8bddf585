# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Authorization credentials.

Credentials are held as a tagged union (``NoAuth | BasicAuth | BearerAuth``)
rather than a pre-encoded string, so reading them back never has to re-parse
the header value. The header encoding itself is kept exactly as Zei has always
sent it: Basic credentials go out as ``"<username>:<password>"`` with no base64
step, Bearer tokens as ``"Bearer <token>"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

BEARER_PREFIX = "Bearer"


class AuthMode(str, Enum):
    NONE = "none"
    BASIC = "basic"
    BEARER = "bearer"


@dataclass(frozen=True)
class NoAuth:
    """No Authorization header is sent."""

    @property
    def mode(self) -> AuthMode:
        return AuthMode.NONE

    def header_value(self) -> str | None:
        return None


@dataclass(frozen=True)
class BasicAuth:
    """
    HTTP Basic credentials.

    The username must not contain a colon: the header value is split on the
    first colon when decoded, so a colon in the username would shift characters
    into the password.
    """

    username: str
    password: str

    @property
    def mode(self) -> AuthMode:
        return AuthMode.BASIC

    def header_value(self) -> str | None:
        return f"{self.username}:{self.password}"

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class BearerAuth:
    """Bearer token credentials."""

    token: str

    @property
    def mode(self) -> AuthMode:
        return AuthMode.BEARER

    def header_value(self) -> str | None:
        return f"{BEARER_PREFIX} {self.token}"

    def __repr__(self) -> str:
        return "BearerAuth(token='***')"


Auth = Union[NoAuth, BasicAuth, BearerAuth]


def parse_authorization(value: str | None) -> Auth:
    """
    Decompose an Authorization header value produced by Zei.

    ``"Bearer <token>"`` is split once on the first space; anything else is
    split once on the first colon into username and password. Values matching
    neither shape yield ``NoAuth()``.
    """
    if not value:
        return NoAuth()
    scheme, sep, token = value.partition(" ")
    if sep and scheme == BEARER_PREFIX:
        return BearerAuth(token)
    username, sep, password = value.partition(":")
    if sep:
        return BasicAuth(username, password)
    return NoAuth()


__all__ = [
    "Auth",
    "AuthMode",
    "BasicAuth",
    "BearerAuth",
    "NoAuth",
    "parse_authorization",
]
