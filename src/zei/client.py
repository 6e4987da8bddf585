# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""The Zei HTTP client."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import IO, Any, Protocol, Union
from urllib.parse import urlencode

import httpx

from .auth import AuthMode
from .config import DEFAULT_USER_AGENT, Config
from .errors import InvalidRequestError
from .transport import TransportSettings, dispatch

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

Body = Union[bytes, str, IO[bytes], Iterable[bytes], None]
FormData = Mapping[str, Union[str, Iterable[str]]]


class ClientInterface(Protocol):
    """
    Interface shared by Client and any other client exposing the same helpers.

    Code written against it can move between a plain HTTP client and Client.
    """

    def do(self, request: httpx.Request) -> httpx.Response: ...

    def get(self, url: str) -> httpx.Response: ...

    def head(self, url: str) -> httpx.Response: ...

    def post(self, url: str, content_type: str, body: Body) -> httpx.Response: ...

    def post_form(self, url: str, data: FormData) -> httpx.Response: ...


def encode_form(data: FormData) -> str:
    """URL-encode form data as ``key=value`` pairs joined by ``&``, sorted by key."""
    pairs: list[tuple[str, str]] = []
    for key in sorted(data):
        value = data[key]
        if isinstance(value, str):
            pairs.append((key, value))
        else:
            pairs.extend((key, item) for item in value)
    return urlencode(pairs)


def build_request(method: str, url: str, *, content: Any = None) -> httpx.Request:
    """Build a request, raising InvalidRequestError before anything is sent."""
    try:
        request = httpx.Request(method, url, content=content)
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidRequestError(f"invalid request {method} {url!r}: {exc}") from exc
    if not request.url.scheme or not request.url.host:
        raise InvalidRequestError(f"invalid request {method} {url!r}: URL must be absolute")
    return request


class Client(ClientInterface):
    """
    HTTP client built on httpx.

    The Client keeps a reference to ``config`` rather than a copy; changes to
    the Config are picked up by the next request.
    """

    def __init__(self, config: Config | None = None):
        self.config = config if config is not None else Config()
        self._transport: httpx.HTTPTransport | None = None
        self._transport_lock = threading.Lock()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def do(self, request: httpx.Request) -> httpx.Response:
        """Send ``request`` with the current Config applied."""
        return self._do(request)

    def get(self, url: str) -> httpx.Response:
        return self._do(build_request("GET", url))

    def head(self, url: str) -> httpx.Response:
        return self._do(build_request("HEAD", url))

    def post(self, url: str, content_type: str, body: Body) -> httpx.Response:
        """
        Issue a POST with ``body`` sent unmodified.

        If ``body`` has a ``close()`` method it is closed after the request,
        whether or not the request succeeds.
        """
        request = build_request("POST", url, content=body)
        request.headers["Content-Type"] = content_type
        return self._do(request, body=body)

    def post_form(self, url: str, data: FormData) -> httpx.Response:
        """Issue a POST with ``data`` URL-encoded as the body."""
        return self.post(url, FORM_CONTENT_TYPE, encode_form(data))

    def close(self) -> None:
        """Close the Client's own transport. A transport supplied via Config is left open."""
        with self._transport_lock:
            transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()

    def _do(self, request: httpx.Request, *, body: Any = None) -> httpx.Response:
        settings = TransportSettings.from_config(self.config)
        self._set_headers(request)
        logger.debug("%s %s (auth=%s)", request.method, request.url, self.config.auth_mode.value)
        default_transport = self._default_transport() if settings.transport is None else None
        return dispatch(request, settings, default_transport, body=body)

    def _default_transport(self) -> httpx.HTTPTransport:
        with self._transport_lock:
            if self._transport is None:
                self._transport = httpx.HTTPTransport()
            return self._transport

    def _set_headers(self, request: httpx.Request) -> None:
        request.headers["User-Agent"] = self.config.user_agent or DEFAULT_USER_AGENT
        if self.config.auth_mode is not AuthMode.NONE:
            request.headers["Authorization"] = self.config.authorization


def new(config: Config) -> Client:
    """Create a Client for ``config``."""
    return Client(config)


__all__ = ["FORM_CONTENT_TYPE", "Client", "ClientInterface", "build_request", "encode_form", "new"]
