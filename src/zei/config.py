# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Client configuration for Zei."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from http.cookiejar import CookieJar

import httpx

from .auth import Auth, AuthMode, BasicAuth, BearerAuth, NoAuth

DEFAULT_USER_AGENT = "Zei/0.1"

RedirectPolicy = Callable[[httpx.Request, Sequence[httpx.Request]], None]


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


@dataclass
class Config:
    """
    Configures a Client.

    A Client re-reads its Config before every request, so it is acceptable to
    change a value for a single request and restore it afterwards.

    - ``user_agent``: value of the User-Agent header; empty means
      ``DEFAULT_USER_AGENT``.
    - ``transport``: the httpx transport that performs requests; ``None`` means
      the Client's own pooled ``httpx.HTTPTransport``.
    - ``check_redirect``: called as ``check_redirect(request, via)`` before a
      redirect is followed, where ``via`` holds the requests already made,
      oldest first. Raising ``UseLastResponse`` returns the most recent response
      unchanged; raising anything else aborts with ``RedirectError``. ``None``
      means the default policy of stopping after 10 consecutive redirects.
    - ``jar``: cookie jar consulted for every outbound request and updated from
      every response. ``None`` means cookies are only sent when set explicitly
      on the request.
    - ``timeout``: seconds; zero means no timeout.
    """

    user_agent: str = ""
    transport: httpx.BaseTransport | None = None
    check_redirect: RedirectPolicy | None = None
    jar: CookieJar | None = None
    timeout: float = 0.0
    _auth: Auth = field(default_factory=NoAuth, init=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """Create a config from environment variables (evaluated at call time)."""
        config = cls(
            user_agent=os.getenv("ZEI_USER_AGENT", cls.user_agent),
            timeout=_float_env("ZEI_HTTP_TIMEOUT", cls.timeout),
        )
        token = os.getenv("ZEI_BEARER_TOKEN")
        if token:
            config.set_bearer_auth(token)
        return config

    @property
    def auth_mode(self) -> AuthMode:
        return self._auth.mode

    @property
    def authorization(self) -> str | None:
        """The exact Authorization header value sent with every request, if any."""
        return self._auth.header_value()

    def set_basic_auth(self, username: str, password: str) -> None:
        """
        Send HTTP Basic credentials with every request, replacing any other auth.

        The credentials are sent as ``"<username>:<password>"`` and are not
        encrypted, so they should only travel over HTTPS. The username may not
        contain a colon.
        """
        self._auth = BasicAuth(username, password)

    def basic_auth(self) -> tuple[str, str, bool]:
        """Return ``(username, password, ok)``; ``ok`` is False unless Basic auth is set."""
        if isinstance(self._auth, BasicAuth):
            return self._auth.username, self._auth.password, True
        return "", "", False

    def set_bearer_auth(self, token: str) -> None:
        """Send ``Bearer <token>`` with every request, replacing any other auth."""
        self._auth = BearerAuth(token)

    def bearer_auth(self) -> tuple[str, bool]:
        """Return ``(token, ok)``; ``ok`` is False unless Bearer auth is set."""
        if isinstance(self._auth, BearerAuth):
            return self._auth.token, True
        return "", False

    def clear_auth(self) -> None:
        self._auth = NoAuth()


def load_config() -> Config:
    """Load a Config from the environment with sensible defaults."""
    return Config.from_env()


__all__ = ["DEFAULT_USER_AGENT", "Config", "RedirectPolicy", "load_config"]
