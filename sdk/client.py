"""HttpClient -- the ``requests`` transport the poll engine talks through.

The client knows nothing about envelopes or models: every call returns the
decoded JSON body and leaves interpretation to :class:`sdk.codec.Codec`.
Transport failures are translated into :class:`~sdk.exceptions.TransportError`
(or :class:`~sdk.exceptions.TransportTimeout`) so callers never see raw
``requests`` exceptions.
"""

from __future__ import annotations

import mimetypes
import os
from typing import Any, Dict, Optional, Tuple, Union

import requests

from core.logger import ReactorLogger
from sdk.exceptions import TransportError, TransportTimeout

logger = ReactorLogger.get_logger()

Timeout = Union[float, Tuple[float, float]]


class TLAPI:
    """Bot API method names used by the engine."""

    GET_UPDATES = "getUpdates"
    GET_ME = "getMe"
    SEND_MESSAGE = "sendMessage"
    SET_CHAT_TITLE = "setChatTitle"
    SEND_VIDEO = "sendVideo"


class HttpClient:
    """Blocking HTTP transport bound to one bot's API base URL.

    Owns a single :class:`requests.Session` (connection pool and proxy
    settings).  Not thread-safe; the engine only touches it from its worker.
    """

    _DEFAULT_CONNECT_TIMEOUT: float = 5
    _DEFAULT_READ_TIMEOUT: float = 30
    # Extra read time granted on top of the long-poll wait.
    _POLL_MARGIN: float = 5

    def __init__(
        self,
        base_url: str,
        *,
        proxy: str | None = None,
        connect_timeout: float = _DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = _DEFAULT_READ_TIMEOUT,
        verify: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        """Create a new client bound to *base_url*.

        Args:
            base_url: Full Bot API base URL (e.g. ``https://api.telegram.org/bot<token>``).
            proxy: Optional proxy URI applied to both ``http`` and ``https``.
            connect_timeout: Seconds allowed for connection setup.
            read_timeout: Seconds allowed for a response to an ordinary call.
            verify: Whether to verify TLS certificates.
            session: Pre-built session, mainly for tests.
        """
        self._base_url = base_url.rstrip("/")
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout
        self._session = session if session is not None else requests.Session()
        self._session.verify = verify
        if proxy:
            self._session.proxies.update({"http": proxy, "https": proxy})
            logger.info("Proxy applied to transport", extra={"proxy": proxy})

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _url(self, endpoint: str) -> str:
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    def _send(self, method: str, endpoint: str, timeout: Timeout, **kwargs: Any) -> Dict[str, Any]:
        """Perform one request and return the parsed JSON body.

        Raises:
            TransportTimeout: If connecting or reading exceeded *timeout*.
            TransportError: On any other transport-level failure.
        """
        url = self._url(endpoint)
        logger.debug("Performing request", extra={"api_endpoint": endpoint, "http_method": method})
        try:
            response = self._session.request(method, url, timeout=timeout, **kwargs)
        except requests.Timeout as exc:
            logger.warning("Request timed out", extra={"api_endpoint": endpoint, "error": str(exc)})
            raise TransportTimeout(endpoint, str(exc)) from exc
        except requests.RequestException as exc:
            logger.error("Request failed", extra={"api_endpoint": endpoint, "error": str(exc)})
            raise TransportError(endpoint, str(exc)) from exc
        try:
            return response.json()
        except ValueError:
            # Not a Bot API answer (proxy error page, gateway failure, ...).
            logger.warning("Non-JSON response", extra={"api_endpoint": endpoint, "status_code": response.status_code})
            return {
                "ok": False,
                "error_code": response.status_code,
                "description": (response.text or "")[:200],
            }

    # ------------------------------------------------------------------
    #  Public API
    # ------------------------------------------------------------------

    def call(self, endpoint: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[Timeout] = None) -> Dict[str, Any]:
        """Call *endpoint* with query *params* and return the raw envelope."""
        if timeout is None:
            timeout = (self._connect_timeout, self._read_timeout)
        return self._send("GET", endpoint, timeout, params=params or {})

    def call_with_file(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]],
        file_path: str,
        field: str = "video",
        content_type: str | None = "video/mpeg",
    ) -> Dict[str, Any]:
        """Upload *file_path* as multipart field *field* alongside *params*.

        Raises:
            FileNotFoundError: If *file_path* does not exist.
        """
        if content_type is None:
            content_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
        logger.info("Uploading file", extra={"api_endpoint": endpoint, "file_path": file_path})
        with open(file_path, "rb") as fh:
            files = {field: (os.path.basename(file_path), fh, content_type)}
            return self._send(
                "POST",
                endpoint,
                (self._connect_timeout, self._read_timeout),
                data=params or {},
                files=files,
            )

    def fetch(self, cursor: int, limit: int, wait: float) -> Dict[str, Any]:
        """Long-poll ``getUpdates`` starting at *cursor*."""
        params = {"offset": cursor, "limit": limit, "timeout": int(wait)}
        return self.call(
            TLAPI.GET_UPDATES,
            params,
            timeout=(self._connect_timeout, wait + self._POLL_MARGIN),
        )

    def identify(self) -> Dict[str, Any]:
        """Call ``getMe`` for the bot behind the token."""
        return self.call(TLAPI.GET_ME)

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()
