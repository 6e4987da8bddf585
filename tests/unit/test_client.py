# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import json
from urllib.parse import parse_qs

import httpx
import pytest

import zei
from zei.client import Client, encode_form, new
from zei.config import Config
from zei.errors import InvalidRequestError

USER_AGENT = "Test_Zei/0.1"


class RecordingHandler:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(handler, **overrides) -> Client:
    config = Config(user_agent=USER_AGENT, transport=httpx.MockTransport(handler), **overrides)
    return new(config)


@pytest.mark.parametrize("method", ["GET", "HEAD"])
def test_bodiless_helpers(method):
    handler = RecordingHandler()
    client = make_client(handler)
    call = client.get if method == "GET" else client.head

    response = call("http://example.com/path")

    assert response.status_code == 200
    assert handler.last.method == method
    assert handler.last.url == "http://example.com/path"
    assert handler.last.content == b""
    assert handler.last.headers["User-Agent"] == USER_AGENT
    assert "Authorization" not in handler.last.headers


def test_default_user_agent_when_unset():
    handler = RecordingHandler()
    client = Client(Config(transport=httpx.MockTransport(handler)))
    client.get("http://example.com/")
    assert handler.last.headers["User-Agent"] == "Zei/0.1"


def test_post_preserves_body_and_content_type():
    handler = RecordingHandler()
    client = make_client(handler)
    body = b'{"testing":true}'

    client.post("http://example.com/json", "application/json", body)

    assert handler.last.method == "POST"
    assert handler.last.content == body
    assert handler.last.headers["Content-Type"] == "application/json"
    assert json.loads(handler.last.content) == {"testing": True}


def test_post_closes_closeable_body():
    handler = RecordingHandler()
    client = make_client(handler)
    body = io.BytesIO(b"streamed payload")

    client.post("http://example.com/upload", "application/octet-stream", body)

    assert handler.last.content == b"streamed payload"
    assert body.closed


def test_post_closes_body_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    body = io.BytesIO(b"payload")

    with pytest.raises(httpx.ConnectError):
        client.post("http://example.com/upload", "text/plain", body)
    assert body.closed


def test_post_form_encodes_body():
    handler = RecordingHandler()
    client = make_client(handler)

    client.post_form("http://example.com/form", {"testing": "true"})

    assert handler.last.content == b"testing=true"
    assert handler.last.headers["Content-Type"] == "application/x-www-form-urlencoded"


def test_encode_form_sorts_and_escapes():
    encoded = encode_form({"b": ["2", "3"], "a": "x y&z"})
    assert encoded == "a=x+y%26z&b=2&b=3"
    assert parse_qs(encoded) == {"a": ["x y&z"], "b": ["2", "3"]}


def test_basic_auth_header_is_sent_verbatim():
    handler = RecordingHandler()
    client = make_client(handler)
    client.config.set_basic_auth("zei", "password")

    client.get("http://example.com/")

    assert handler.last.headers["Authorization"] == "zei:password"


def test_bearer_auth_header_is_sent_verbatim():
    handler = RecordingHandler()
    client = make_client(handler)
    client.config.set_bearer_auth("tok123")

    client.get("http://example.com/")

    assert handler.last.headers["Authorization"] == "Bearer tok123"


def test_config_changes_apply_to_next_request():
    handler = RecordingHandler()
    config = Config(transport=httpx.MockTransport(handler))
    client = Client(config)

    client.get("http://example.com/")
    assert handler.last.headers["User-Agent"] == "Zei/0.1"

    config.user_agent = "Changed/1"
    config.set_bearer_auth("later")
    client.get("http://example.com/")
    assert handler.last.headers["User-Agent"] == "Changed/1"
    assert handler.last.headers["Authorization"] == "Bearer later"

    config.user_agent = ""
    config.clear_auth()
    client.get("http://example.com/")
    assert handler.last.headers["User-Agent"] == "Zei/0.1"
    assert "Authorization" not in handler.last.headers


def test_do_overwrites_caller_headers():
    handler = RecordingHandler()
    client = make_client(handler)
    client.config.set_bearer_auth("tok")
    request = httpx.Request(
        "PUT",
        "http://example.com/item",
        headers={"User-Agent": "caller/1", "Authorization": "stale", "X-Keep": "1"},
        content=b"data",
    )

    response = client.do(request)

    assert response.status_code == 200
    assert handler.last.method == "PUT"
    assert handler.last.headers["User-Agent"] == USER_AGENT
    assert handler.last.headers["Authorization"] == "Bearer tok"
    assert handler.last.headers["X-Keep"] == "1"
    assert handler.last.headers.get_list("User-Agent") == [USER_AGENT]


def test_timeout_is_applied_per_request():
    handler = RecordingHandler()
    client = make_client(handler, timeout=2.5)

    client.get("http://example.com/")
    assert handler.last.extensions["timeout"]["read"] == 2.5

    client.config.timeout = 0
    client.get("http://example.com/")
    assert handler.last.extensions["timeout"]["read"] is None


def test_transport_errors_propagate_unwrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    client = make_client(handler)
    with pytest.raises(httpx.ReadTimeout) as excinfo:
        client.get("http://example.com/")
    assert not isinstance(excinfo.value, zei.ZeiError)


@pytest.mark.parametrize("url", ["/relative/path", "example.com/no-scheme", ""])
def test_construction_errors_raise_before_dispatch(url):
    handler = RecordingHandler()
    client = make_client(handler)

    with pytest.raises(InvalidRequestError):
        client.get(url)
    with pytest.raises(InvalidRequestError):
        client.post_form(url, {"a": "b"})
    assert handler.requests == []


def test_invalid_request_error_is_value_error():
    with pytest.raises(ValueError):
        zei.client.build_request("GET", "/nope")


def test_client_context_manager_closes_own_transport(monkeypatch):
    closed = []
    client = Client(Config())
    transport = client._default_transport()
    monkeypatch.setattr(transport, "close", lambda: closed.append(True))

    with client as entered:
        assert entered is client
    assert closed == [True]


def test_client_never_closes_configured_transport():
    class TrackingTransport(httpx.MockTransport):
        closed = False

        def close(self) -> None:
            self.closed = True

    transport = TrackingTransport(RecordingHandler())
    with Client(Config(transport=transport)) as client:
        client.get("http://example.com/")
        client.get("http://example.com/")
    assert transport.closed is False


def test_client_satisfies_interface():
    client: zei.ClientInterface = Client()
    assert callable(client.do)
    assert callable(client.post_form)
    client.close()


def test_configured_auth_wins_over_url_userinfo():
    handler = RecordingHandler()
    client = make_client(handler)
    client.config.set_bearer_auth("tok123")

    client.get("http://u:p@example.com/")

    assert handler.last.headers.get_list("Authorization") == ["Bearer tok123"]


def test_configured_auth_wins_over_userinfo_after_redirect():
    seen: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        if request.url.path == "/start":
            return httpx.Response(302, headers={"Location": "http://u:p@example.com/final"})
        return httpx.Response(200)

    client = make_client(handler)
    client.config.set_basic_auth("zei", "password")

    client.get("http://example.com/start")

    assert seen == ["zei:password", "zei:password"]


def test_default_transport_created_lazily():
    handler = RecordingHandler()
    client = make_client(handler)

    client.get("http://example.com/")

    assert client._transport is None
    client.close()

    default_client = Client(Config())
    assert default_client._transport is None
    assert default_client._default_transport() is default_client._default_transport()
    default_client.close()
    assert default_client._transport is None
