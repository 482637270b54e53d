"""Telegram Bot API SDK — Pydantic models, codec, HTTP transport and exceptions.

Usage::

    from sdk import Codec, HttpClient, APIException
    from sdk.models import Update, User

    client = HttpClient("https://api.telegram.org/bot<token>")
    me = Codec().decode(client.identify(), User)
"""

from sdk.client import HttpClient
from sdk.codec import Codec
from sdk.exceptions import (
    APIException,
    ErrorKind,
    InvalidCredential,
    PrincipalNotFound,
    TransportError,
    TransportTimeout,
    UnclassifiedServiceError,
    classify,
)

__all__ = [
    "HttpClient",
    "Codec",
    "APIException",
    "ErrorKind",
    "InvalidCredential",
    "PrincipalNotFound",
    "TransportError",
    "TransportTimeout",
    "UnclassifiedServiceError",
    "classify",
]
