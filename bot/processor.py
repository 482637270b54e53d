"""Message-processor capability implemented by application code."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, List

from sdk.models import BotCommand, Message

if TYPE_CHECKING:
    from bot.server import BotServer


class MessageProcessor(abc.ABC):
    """Receives classified updates from :mod:`bot.dispatcher`.

    Callbacks run synchronously on the engine's worker thread.  They must not
    perform network I/O themselves; anything outgoing goes through the
    *server* handle, which only enqueues.
    """

    @abc.abstractmethod
    def on_message(self, message: Message, server: BotServer) -> None:
        """A new message without any bot command."""

    @abc.abstractmethod
    def on_bot_commands(self, message: Message, commands: List[BotCommand], server: BotServer) -> None:
        """A new message carrying one or more bot commands."""

    def on_message_edited(self, message: Message, server: BotServer) -> None:
        """An edited message.  Ignored unless overridden."""
