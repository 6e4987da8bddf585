# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Per-request transport settings and dispatch.

Every request gets its own immutable ``TransportSettings`` snapshot and its own
short-lived ``httpx.Client`` wrapped around the shared, pooled transport. No
transport field is ever mutated in place, so concurrent requests on one Client
cannot observe each other's settings.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from http.cookiejar import CookieJar
from typing import Any

import httpx

from .config import Config, RedirectPolicy
from .errors import RedirectError, UseLastResponse

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 10


def default_check_redirect(request: httpx.Request, via: Sequence[httpx.Request]) -> None:
    """Stop after ``MAX_REDIRECTS`` consecutive redirects."""
    if len(via) >= MAX_REDIRECTS:
        raise httpx.TooManyRedirects(f"stopped after {MAX_REDIRECTS} redirects", request=request)


@dataclass(frozen=True)
class TransportSettings:
    """Transport-level fields of a Config, captured for a single request."""

    transport: httpx.BaseTransport | None = None
    check_redirect: RedirectPolicy | None = None
    jar: CookieJar | None = None
    timeout: float = 0.0

    @classmethod
    def from_config(cls, config: Config) -> TransportSettings:
        return cls(
            transport=config.transport,
            check_redirect=config.check_redirect,
            jar=config.jar,
            timeout=config.timeout,
        )

    @property
    def redirect_policy(self) -> RedirectPolicy:
        return self.check_redirect or default_check_redirect

    def httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout if self.timeout and self.timeout > 0 else None)


class _BorrowedTransport(httpx.BaseTransport):
    """Lends a transport to a per-request httpx.Client without handing over its lifetime."""

    def __init__(self, transport: httpx.BaseTransport):
        self._transport = transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._transport.handle_request(request)

    def close(self) -> None:
        return None


def _close_body(body: Any) -> None:
    close = getattr(body, "close", None)
    if callable(close):
        close()


def dispatch(
    request: httpx.Request,
    settings: TransportSettings,
    default_transport: httpx.BaseTransport | None,
    *,
    body: Any = None,
) -> httpx.Response:
    """
    Send ``request`` with ``settings`` applied and return the final response.

    Redirects are followed one hop at a time, consulting the redirect policy
    before each hop. Transport exceptions propagate unwrapped. A closeable
    ``body`` is closed once the exchange completes or fails.
    """
    transport = settings.transport if settings.transport is not None else default_transport
    request.extensions = {**request.extensions, "timeout": settings.httpx_timeout().as_dict()}

    try:
        with httpx.Client(
            transport=_BorrowedTransport(transport),
            cookies=settings.jar,
            follow_redirects=False,
        ) as client:
            if settings.jar is not None:
                client.cookies.set_cookie_header(request)
            return _send_handling_redirects(client, request, settings.redirect_policy)
    finally:
        if body is not None:
            _close_body(body)


def _send(client: httpx.Client, request: httpx.Request) -> httpx.Response:
    # httpx derives Basic credentials from URL userinfo unless told otherwise;
    # an Authorization header already on the request always wins.
    if "Authorization" in request.headers:
        return client.send(request, auth=httpx.Auth())
    return client.send(request)


def _send_handling_redirects(client: httpx.Client, request: httpx.Request, policy: RedirectPolicy) -> httpx.Response:
    history: list[httpx.Response] = []
    via: list[httpx.Request] = []

    response = _send(client, request)
    while response.next_request is not None:
        next_request = response.next_request
        via.append(response.request)
        try:
            policy(next_request, list(via))
        except UseLastResponse:
            response.history = list(history)
            return response
        except Exception as exc:
            response.close()
            logger.info("Redirect to %s refused: %s", next_request.url, exc)
            raise RedirectError(str(exc), response=response, request=next_request) from exc

        logger.debug("Following redirect %d: %s %s", len(via), next_request.method, next_request.url)
        history.append(response)
        response = _send(client, next_request)

    response.history = list(history)
    return response


__all__ = ["MAX_REDIRECTS", "TransportSettings", "default_check_redirect", "dispatch"]
