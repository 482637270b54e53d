"""Error taxonomy for the Reactor Telegram SDK.

Service failures (an envelope with ``ok: false``) are mapped to a closed set of
:class:`APIException` subclasses by :func:`classify`.  Transport failures
(timeouts, refused connections) are reported as :class:`TransportError`.
"""

import enum
from typing import Any, Dict, Optional

BAD_AUTHORIZATION = 401
NOT_FOUND = 404


class ErrorKind(enum.Enum):
    """Closed set of failure conditions surfaced by the engine."""

    INVALID_CREDENTIAL = "invalid_credential"
    PRINCIPAL_NOT_FOUND = "principal_not_found"
    TRANSPORT_TIMEOUT = "transport_timeout"
    UNCLASSIFIED = "unclassified"


def classify(code: int) -> ErrorKind:
    """Map a Telegram ``error_code`` to its :class:`ErrorKind`."""
    if code == BAD_AUTHORIZATION:
        return ErrorKind.INVALID_CREDENTIAL
    if code == NOT_FOUND:
        return ErrorKind.PRINCIPAL_NOT_FOUND
    return ErrorKind.UNCLASSIFIED


class APIException(Exception):
    """Base exception for failed responses from the Telegram Bot API.

    Attributes:
        error_code: ``error_code`` from the response envelope.
        response_body: Raw response body as a dict, when available.
    """

    kind: ErrorKind = ErrorKind.UNCLASSIFIED

    def __init__(self, error_code: int, response_body: Optional[Dict[str, Any]] = None) -> None:
        """Initialise with the error code and optional body."""
        self.error_code = error_code
        self.response_body = response_body or {}
        description = self.response_body.get("description", "Unknown error")
        super().__init__(f"API error {error_code}: {description}")


class InvalidCredential(APIException):
    """The service rejected the bot token."""

    kind = ErrorKind.INVALID_CREDENTIAL


class PrincipalNotFound(APIException):
    """The bot behind the token does not exist."""

    kind = ErrorKind.PRINCIPAL_NOT_FOUND


class UnclassifiedServiceError(APIException):
    """Any other non-ok response; ``error_code`` is kept for diagnostics."""

    kind = ErrorKind.UNCLASSIFIED


class TransportError(Exception):
    """The request never produced a service response."""

    kind: ErrorKind = ErrorKind.UNCLASSIFIED

    def __init__(self, endpoint: str, reason: str) -> None:
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"Transport failure on {endpoint}: {reason}")


class TransportTimeout(TransportError):
    """Connection setup or the long-poll wait exceeded its bound."""

    kind = ErrorKind.TRANSPORT_TIMEOUT


_EXCEPTIONS_BY_KIND: Dict[ErrorKind, type] = {
    ErrorKind.INVALID_CREDENTIAL: InvalidCredential,
    ErrorKind.PRINCIPAL_NOT_FOUND: PrincipalNotFound,
    ErrorKind.UNCLASSIFIED: UnclassifiedServiceError,
}


def exception_for(error_code: int, response_body: Optional[Dict[str, Any]] = None) -> APIException:
    """Build the :class:`APIException` subclass matching *error_code*."""
    exc_cls = _EXCEPTIONS_BY_KIND[classify(error_code)]
    return exc_cls(error_code, response_body)
