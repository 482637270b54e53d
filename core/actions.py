"""Outgoing actions — the closed set of effects a processor can request.

Each action is a frozen value object capturing everything needed to perform
it.  :func:`execute_action` is the single place that renders an action into a
transport call; the queue never looks inside an action.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Union

from core.logger import ReactorLogger
from sdk.codec import Codec
from sdk.models import Chat, Envelope, Message

if TYPE_CHECKING:
    from sdk.client import HttpClient

logger = ReactorLogger.get_logger()

# Bot API method names; mirrors sdk.client.TLAPI without importing the transport.
SEND_MESSAGE = "sendMessage"
SET_CHAT_TITLE = "setChatTitle"
SEND_VIDEO = "sendVideo"


@dataclasses.dataclass(frozen=True, slots=True)
class SendMessage:
    chat: Chat
    text: str


@dataclasses.dataclass(frozen=True, slots=True)
class ReplyMessage:
    """Send *text* to *chat* as a reply to *target*."""

    chat: Chat
    target: Message
    text: str


@dataclasses.dataclass(frozen=True, slots=True)
class SetChatTitle:
    chat: Chat
    title: str


@dataclasses.dataclass(frozen=True, slots=True)
class SendVideo:
    """Upload the local file at *file_path* to *chat*."""

    chat: Chat
    file_path: str


Action = Union[SendMessage, ReplyMessage, SetChatTitle, SendVideo]


def action_name(action: Action) -> str:
    """Short name used in log records, e.g. ``"SendMessage"``."""
    return type(action).__name__


def execute_action(action: Action, transport: HttpClient, codec: Codec) -> Envelope:
    """Perform *action* against *transport* and check the response.

    Raises:
        APIException: The service answered with ``ok: false``.
        TransportError: The request did not complete.
        TypeError: *action* is not one of the supported kinds.
    """
    if isinstance(action, SendMessage):
        body = transport.call(SEND_MESSAGE, {"chat_id": action.chat.id, "text": action.text})
    elif isinstance(action, ReplyMessage):
        body = transport.call(SEND_MESSAGE, {
            "chat_id": action.chat.id,
            "text": action.text,
            "reply_to_message_id": action.target.message_id,
        })
    elif isinstance(action, SetChatTitle):
        body = transport.call(SET_CHAT_TITLE, {"chat_id": action.chat.id, "title": action.title})
    elif isinstance(action, SendVideo):
        logger.info("Sending video", extra={"chat_id": action.chat.id, "file_path": action.file_path})
        body = transport.call_with_file(SEND_VIDEO, {"chat_id": action.chat.id}, action.file_path)
    else:
        raise TypeError(f"Unsupported action: {action!r}")
    return codec.check(body)
