"""CommandRouter — a message processor that routes bot commands by name."""

from __future__ import annotations

from typing import List

from core.logger import ReactorLogger
from sdk.models import BotCommand, Message
from bot.processor import MessageProcessor
from bot.registry import CommandRegistry
from bot.server import BotServer

logger = ReactorLogger.get_logger()

EDITED_MESSAGE_NOTICE = "Edited messages are not processed."


class CommandRouter(MessageProcessor):
    """Route each extracted command to its registered handler.

    Commands with no handler get an ``Unknown command "<cmd>".`` message in
    the same chat.  Command messages without a sender are ignored.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    def on_message(self, message: Message, server: BotServer) -> None:
        logger.debug("Plain message ignored", extra={"chat_id": message.chat.id, "message_id": message.message_id})

    def on_bot_commands(self, message: Message, commands: List[BotCommand], server: BotServer) -> None:
        if message.from_field is None:
            logger.debug("Command message has no sender, skipping", extra={"chat_id": message.chat.id})
            return

        for command in commands:
            if self._registry.dispatch(message, command, server):
                logger.info(
                    "Command handled",
                    extra={"command": command.command, "chat_id": message.chat.id, "user_id": message.from_field.id},
                )
            else:
                self.on_unknown_command(message, command, server)

    def on_unknown_command(self, message: Message, command: BotCommand, server: BotServer) -> None:
        logger.info("Unknown command", extra={"command": command.command, "chat_id": message.chat.id})
        server.send_message(message.chat, f'Unknown command "{command.command}".')

    def on_message_edited(self, message: Message, server: BotServer) -> None:
        server.reply_message(message.chat, message, EDITED_MESSAGE_NOTICE)
