"""Default command handlers for the Reactor bot.

Each public function handles a single slash-command and is invoked by
:class:`bot.router.CommandRouter` through the module-level registry.  Handlers
never talk to the network: every reply is queued on the server handle.
"""

import os

import config
from core.logger import ReactorLogger
from sdk.models import BotCommand, Message
from bot.registry import registry
from bot.server import BotServer

logger = ReactorLogger.get_logger()


def _command_argument(message: Message) -> str:
    """Return the text following the first word of the message, stripped."""
    parts = (message.text or "").split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""


@registry.register("/help", description="Show available commands")
def handle_help(message: Message, command: BotCommand, server: BotServer) -> None:
    """Handle /help — list every registered command."""
    logger.info("User invoked /help", extra={"chat_id": message.chat.id, "command": "/help"})
    lines = [f"{cmd} — {entry.description}" for cmd, entry in registry.entries().items()]
    server.reply_message(message.chat, message, "Available commands:\n" + "\n".join(lines))


@registry.register("/status", description="Show the engine status")
def handle_status(message: Message, command: BotCommand, server: BotServer) -> None:
    """Handle /status — report the engine state and polling cursor."""
    logger.info("User invoked /status", extra={"chat_id": message.chat.id, "command": "/status"})
    engine = server.engine
    server.reply_message(
        message.chat,
        message,
        f"📊 Status:\n"
        f"• State: {engine.state.value}\n"
        f"• Cursor: {engine.cursor}\n"
        f"• Pending actions: {engine.pending_actions}",
    )


@registry.register("/title", description="Rename this chat: /title <new title>")
def handle_title(message: Message, command: BotCommand, server: BotServer) -> None:
    """Handle /title — rename the chat the command was sent in.

    Usage: /title <new title>
    """
    chat = message.chat
    logger.info("User invoked /title", extra={"chat_id": chat.id, "command": "/title"})

    if chat.type == "private":
        server.reply_message(chat, message, "❌ Private chats cannot be renamed.")
        return

    title = _command_argument(message)
    if not title:
        server.reply_message(chat, message, "Usage: /title <new title>")
        return

    server.set_chat_title(chat, title)


@registry.register("/get_video", description="Send the configured video")
def handle_get_video(message: Message, command: BotCommand, server: BotServer) -> None:
    """Handle /get_video — upload the file configured as ``VIDEO_PATH``."""
    chat = message.chat
    logger.info("User invoked /get_video", extra={"chat_id": chat.id, "command": "/get_video"})

    video_path = config.VIDEO_PATH
    if not video_path or not os.path.isfile(video_path):
        logger.warning("No video available", extra={"chat_id": chat.id, "video_path": video_path})
        server.reply_message(chat, message, "❌ No video is available right now.")
        return

    server.send_video(chat, video_path)


@registry.register("/auth", description="Check whether you are authorized")
def handle_auth(message: Message, command: BotCommand, server: BotServer) -> None:
    """Handle /auth — tell the sender whether their user ID is on ``AUTHORIZED_USERS``."""
    user = message.from_field
    if user is None:
        return
    authorized = user.id in config.AUTHORIZED_USERS
    logger.info(
        "User invoked /auth",
        extra={"chat_id": message.chat.id, "user_id": user.id, "command": "/auth", "authorized": authorized},
    )
    if authorized:
        server.reply_message(message.chat, message, f"✅ {user.first_name}, you are authorized.")
    else:
        server.reply_message(message.chat, message, f"⛔ User {user.id} is not authorized.")
