# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exceptions raised by Zei itself.

Transport failures are never wrapped: they surface as the ``httpx`` exceptions
raised by the transport.
"""

from __future__ import annotations

import httpx


class ZeiError(Exception):
    """Base class for errors raised by Zei."""


class InvalidRequestError(ZeiError, ValueError):
    """A request could not be constructed (malformed URL, unsupported scheme)."""


class UseLastResponse(ZeiError):
    """
    Raised by a redirect policy to stop following redirects.

    The most recent response is returned to the caller as-is, with no error.
    """


class RedirectError(ZeiError):
    """A redirect policy refused to follow a redirect.

    ``response`` is the last response received (already closed) and ``request``
    is the redirect request that was refused. The policy's own exception is
    available as ``__cause__``.
    """

    def __init__(self, message: str, *, response: httpx.Response, request: httpx.Request):
        super().__init__(message)
        self.response = response
        self.request = request


__all__ = ["InvalidRequestError", "RedirectError", "UseLastResponse", "ZeiError"]
