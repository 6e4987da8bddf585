# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Zei is an HTTP client library built on httpx.

A Client applies its Config (User-Agent, Authorization, timeout, redirect
policy, cookie jar, transport) to every outgoing request. HTTP/2 is available
through httpx when a transport created with ``httpx.HTTPTransport(http2=True)``
is supplied via ``Config.transport``.
"""

import logging

from .auth import AuthMode, BasicAuth, BearerAuth, NoAuth, parse_authorization
from .client import FORM_CONTENT_TYPE, Client, ClientInterface, encode_form, new
from .config import DEFAULT_USER_AGENT, Config, load_config
from .errors import InvalidRequestError, RedirectError, UseLastResponse, ZeiError
from .transport import MAX_REDIRECTS, TransportSettings, default_check_redirect
from .version import __version__

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AuthMode",
    "BasicAuth",
    "BearerAuth",
    "Client",
    "ClientInterface",
    "Config",
    "DEFAULT_USER_AGENT",
    "FORM_CONTENT_TYPE",
    "InvalidRequestError",
    "MAX_REDIRECTS",
    "NoAuth",
    "RedirectError",
    "TransportSettings",
    "UseLastResponse",
    "ZeiError",
    "default_check_redirect",
    "encode_form",
    "load_config",
    "new",
    "parse_authorization",
    "__version__",
]
