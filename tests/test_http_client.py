import json

import pytest

from arcdesk.foundation.http_client import HttpClient, HttpError, _parse_sse_line


class _FakeResponse:
    def __init__(self, status_code=200, payload=None, lines=(), reason="OK"):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.reason = reason
        self.headers = {"Content-Type": "application/json"}
        self._payload = payload
        self._lines = list(lines)
        self.text = json.dumps(payload) if payload is not None else ""

    def json(self):
        return self._payload

    def iter_lines(self, decode_unicode=False):
        return iter(self._lines)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class _FakeSession:
    def __init__(self, response):
        self.headers = {}
        self.response = response
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self.response

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self.response


def test_client_sets_user_agent_and_timeout():
    session = _FakeSession(_FakeResponse(payload={"models": []}))
    client = HttpClient(timeout_s=5.0, user_agent="arcdesk-test", session=session)

    response = client.get_json("https://api.example.test/models", headers={"Authorization": "Bearer k"})

    assert session.headers["User-Agent"] == "arcdesk-test"
    assert response.status == 200
    assert response.data == {"models": []}
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "https://api.example.test/models")
    assert kwargs["timeout"] == 5.0
    assert kwargs["headers"] == {"Authorization": "Bearer k"}


def test_non_2xx_raises_http_error_with_body():
    session = _FakeSession(_FakeResponse(status_code=401, payload={"error": "nope"}, reason="Unauthorized"))
    client = HttpClient(session=session)

    with pytest.raises(HttpError, match=r"HTTP 401: Unauthorized") as excinfo:
        client.get_json("https://api.example.test/models")

    assert excinfo.value.status == 401
    assert excinfo.value.status_text == "Unauthorized"
    assert "nope" in excinfo.value.body


def test_stream_lines_yields_payloads_until_done():
    lines = [
        ": keep-alive",
        'data: {"delta": "Hel"}',
        "",
        "data: not-json",
        'data: {"delta": "lo"}',
        "data: [DONE]",
        'data: {"delta": "ignored"}',
    ]
    session = _FakeSession(_FakeResponse(lines=lines))
    client = HttpClient(session=session)

    chunks = list(client.stream_lines("https://api.example.test/chat", {"stream": True}))

    assert chunks == [{"delta": "Hel"}, {"delta": "lo"}]
    method, _, kwargs = session.calls[0]
    assert method == "POST"
    assert kwargs["stream"] is True
    assert json.loads(kwargs["data"]) == {"stream": True}


@pytest.mark.parametrize(
    "line, expected",
    [
        ("data: [DONE]", (True, None)),
        ('data: {"a": 1}', (False, {"a": 1})),
        ("event: ping", (False, None)),
        ("", (False, None)),
    ],
)
def test_parse_sse_line(line, expected):
    assert _parse_sse_line(line) == expected
