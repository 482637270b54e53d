"""Tests for the HttpClient transport and the exception taxonomy."""

import sys
import os
from unittest.mock import MagicMock

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sdk.client import HttpClient, TLAPI
from sdk.exceptions import (
    APIException,
    ErrorKind,
    InvalidCredential,
    PrincipalNotFound,
    TransportError,
    TransportTimeout,
    UnclassifiedServiceError,
    classify,
    exception_for,
)


def _make_session(body=None, status_code: int = 200) -> MagicMock:
    """Build a fake requests.Session whose request() returns *body*."""
    session = MagicMock()
    session.proxies = {}
    response = MagicMock()
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("No JSON")
        response.text = "Bad Gateway"
    else:
        response.json.return_value = body
    session.request.return_value = response
    return session


# ── Exception taxonomy ───────────────────────────────────────────────────────


class TestClassify:
    """classify() is a pure code → kind mapping."""

    def test_bad_authorization(self) -> None:
        assert classify(401) is ErrorKind.INVALID_CREDENTIAL

    def test_not_found(self) -> None:
        assert classify(404) is ErrorKind.PRINCIPAL_NOT_FOUND

    @pytest.mark.parametrize("code", [0, 400, 403, 409, 429, 500, 502])
    def test_everything_else_unclassified(self, code: int) -> None:
        assert classify(code) is ErrorKind.UNCLASSIFIED


class TestExceptions:
    """Validate the exception classes."""

    def test_attributes(self) -> None:
        exc = APIException(403, {"description": "Forbidden"})
        assert exc.error_code == 403
        assert exc.response_body == {"description": "Forbidden"}
        assert "403" in str(exc)
        assert "Forbidden" in str(exc)

    def test_default_body(self) -> None:
        exc = APIException(500)
        assert exc.response_body == {}
        assert "Unknown error" in str(exc)

    def test_exception_for_401(self) -> None:
        exc = exception_for(401, {"description": "Unauthorized"})
        assert isinstance(exc, InvalidCredential)
        assert exc.kind is ErrorKind.INVALID_CREDENTIAL

    def test_exception_for_404(self) -> None:
        assert isinstance(exception_for(404), PrincipalNotFound)

    def test_exception_for_other_keeps_code(self) -> None:
        exc = exception_for(429)
        assert type(exc) is UnclassifiedServiceError
        assert exc.error_code == 429

    def test_service_errors_share_base(self) -> None:
        for cls in (InvalidCredential, PrincipalNotFound, UnclassifiedServiceError):
            assert issubclass(cls, APIException)

    def test_timeout_is_transport_error(self) -> None:
        exc = TransportTimeout("getUpdates", "read timed out")
        assert isinstance(exc, TransportError)
        assert exc.kind is ErrorKind.TRANSPORT_TIMEOUT
        assert exc.endpoint == "getUpdates"
        assert "read timed out" in str(exc)


# ── HttpClient construction ─────────────────────────────────────────────────


class TestClientInit:
    """Validate client initialisation."""

    def test_base_url_strip(self) -> None:
        c = HttpClient("https://api.example.com/bot123/", session=_make_session({}))
        assert c._base_url == "https://api.example.com/bot123"

    def test_default_timeouts(self) -> None:
        c = HttpClient("https://api.example.com", session=_make_session({}))
        assert c._connect_timeout == 5
        assert c._read_timeout == 30

    def test_proxy_applied_to_session(self) -> None:
        session = _make_session({})
        HttpClient("https://api.example.com", proxy="socks5://127.0.0.1:9050", session=session)
        assert session.proxies == {
            "http": "socks5://127.0.0.1:9050",
            "https": "socks5://127.0.0.1:9050",
        }

    def test_no_proxy_by_default(self) -> None:
        session = _make_session({})
        HttpClient("https://api.example.com", session=session)
        assert session.proxies == {}

    def test_verify_flag(self) -> None:
        session = _make_session({})
        HttpClient("https://api.example.com", verify=False, session=session)
        assert session.verify is False


# ── Requests ─────────────────────────────────────────────────────────────────


class TestCall:
    """Validate call(), fetch() and identify()."""

    def test_call_returns_body(self) -> None:
        session = _make_session({"ok": True, "result": {"message_id": 1}})
        c = HttpClient("https://api.example.com/bot1", session=session)
        body = c.call(TLAPI.SEND_MESSAGE, {"chat_id": 42, "text": "hello"})

        assert body == {"ok": True, "result": {"message_id": 1}}
        args, kwargs = session.request.call_args
        assert args == ("GET", "https://api.example.com/bot1/sendMessage")
        assert kwargs["params"] == {"chat_id": 42, "text": "hello"}
        assert kwargs["timeout"] == (5, 30)

    def test_fetch_parameters(self) -> None:
        session = _make_session({"ok": True, "result": []})
        c = HttpClient("https://api.example.com/bot1", session=session)
        c.fetch(cursor=11, limit=100, wait=15)

        args, kwargs = session.request.call_args
        assert args[1].endswith("/getUpdates")
        assert kwargs["params"] == {"offset": 11, "limit": 100, "timeout": 15}
        # Read timeout must outlast the long-poll wait.
        assert kwargs["timeout"] == (5, 20)

    def test_identify_calls_get_me(self) -> None:
        session = _make_session({"ok": True, "result": {"id": 1, "is_bot": True, "first_name": "Bot"}})
        c = HttpClient("https://api.example.com/bot1", session=session)
        body = c.identify()
        assert body["result"]["first_name"] == "Bot"
        assert session.request.call_args[0][1].endswith("/getMe")

    def test_error_envelope_is_returned_not_raised(self) -> None:
        """Interpreting ok=false is the codec's job."""
        session = _make_session({"ok": False, "error_code": 401, "description": "Unauthorized"}, status_code=401)
        c = HttpClient("https://api.example.com", session=session)
        assert c.identify()["error_code"] == 401

    def test_non_json_body_becomes_failed_envelope(self) -> None:
        session = _make_session(None, status_code=502)
        c = HttpClient("https://api.example.com", session=session)
        body = c.call("getMe")
        assert body["ok"] is False
        assert body["error_code"] == 502
        assert body["description"] == "Bad Gateway"

    def test_timeout_raises_transport_timeout(self) -> None:
        session = _make_session({})
        session.request.side_effect = requests.ReadTimeout("timed out")
        c = HttpClient("https://api.example.com", session=session)
        with pytest.raises(TransportTimeout):
            c.fetch(0, 100, 15)

    def test_network_error_raises_transport_error(self) -> None:
        session = _make_session({})
        session.request.side_effect = requests.ConnectionError("offline")
        c = HttpClient("https://api.example.com", session=session)
        with pytest.raises(TransportError) as exc_info:
            c.call("getMe")
        assert not isinstance(exc_info.value, TransportTimeout)

    def test_close_closes_session(self) -> None:
        session = _make_session({})
        HttpClient("https://api.example.com", session=session).close()
        session.close.assert_called_once()


class TestCallWithFile:
    """Validate multipart uploads."""

    def test_upload(self, tmp_path) -> None:
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"\x00\x01")
        session = _make_session({"ok": True, "result": {"message_id": 3}})
        c = HttpClient("https://api.example.com/bot1", session=session)

        body = c.call_with_file(TLAPI.SEND_VIDEO, {"chat_id": 42}, str(video))

        assert body["ok"] is True
        args, kwargs = session.request.call_args
        assert args == ("POST", "https://api.example.com/bot1/sendVideo")
        assert kwargs["data"] == {"chat_id": 42}
        name, _fh, content_type = kwargs["files"]["video"]
        assert name == "clip.mp4"
        assert content_type == "video/mpeg"

    def test_guessed_content_type(self, tmp_path) -> None:
        doc = tmp_path / "notes.txt"
        doc.write_text("hi")
        session = _make_session({"ok": True, "result": {}})
        c = HttpClient("https://api.example.com", session=session)
        c.call_with_file("sendDocument", {}, str(doc), field="document", content_type=None)
        assert session.request.call_args.kwargs["files"]["document"][2] == "text/plain"

    def test_missing_file(self, tmp_path) -> None:
        c = HttpClient("https://api.example.com", session=_make_session({}))
        with pytest.raises(FileNotFoundError):
            c.call_with_file(TLAPI.SEND_VIDEO, {"chat_id": 1}, str(tmp_path / "missing.mp4"))
