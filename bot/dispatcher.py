"""Update dispatcher.

Classifies each update of a fetched batch and routes it to the
:class:`~bot.processor.MessageProcessor`:

* a new message with ``bot_command`` entities → ``on_bot_commands``;
* any other new message → ``on_message``;
* an edited message → ``on_message_edited``;
* anything else is ignored.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List

from core.logger import ReactorLogger
from sdk.models import BotCommand, Message, MessageEntity, Update
from bot.processor import MessageProcessor

if TYPE_CHECKING:
    from bot.server import BotServer

logger = ReactorLogger.get_logger()


def command_text(text: str, entity: MessageEntity) -> str:
    """Return the command named by *entity* inside *text*.

    Characters are read from index ``entity.offset`` up to, but not
    including, index ``entity.length``, and reading stops at the first ``@``
    so ``/cmd@somebot`` yields ``/cmd``.  The end bound is ``length``, not
    ``offset + length``, so a command that does not start at position 0 comes
    out truncated.
    """
    chars: List[str] = []
    for index in range(entity.offset, min(entity.length, len(text))):
        char = text[index]
        if char == "@":
            break
        chars.append(char)
    return "".join(chars)


def extract_bot_commands(message: Message) -> List[BotCommand]:
    """Build a :class:`BotCommand` for every ``bot_command`` entity, in order."""
    if not message.entities:
        return []
    text = message.text or ""
    return [
        BotCommand(command=command_text(text, entity), offset=entity.offset, length=entity.length)
        for entity in message.entities
        if entity.is_bot_command
    ]


def process_update(processor: MessageProcessor, update: Update, server: BotServer) -> None:
    """Dispatch a single update to the appropriate processor callback."""
    update_id = update.update_id

    if update.message is not None:
        message = update.message
        commands = extract_bot_commands(message)
        if commands:
            logger.info(
                "Dispatching bot commands",
                extra={"update_id": update_id, "chat_id": message.chat.id, "commands": [c.command for c in commands]},
            )
            processor.on_bot_commands(message, commands, server)
        else:
            logger.debug("Dispatching plain message", extra={"update_id": update_id, "chat_id": message.chat.id})
            processor.on_message(message, server)

    if update.edited_message is not None:
        logger.debug("Dispatching edited message", extra={"update_id": update_id, "chat_id": update.edited_message.chat.id})
        processor.on_message_edited(update.edited_message, server)

    if update.message is None and update.edited_message is None:
        logger.debug("Update carries no supported payload, skipping", extra={"update_id": update_id})


def dispatch_updates(processor: MessageProcessor, updates: Iterable[Update], server: BotServer) -> None:
    """Dispatch every update of a batch, in batch order."""
    for update in updates:
        process_update(processor, update, server)
