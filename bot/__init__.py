"""Telegram bot application layer — dispatch, processors, command routing.

This package may import from ``core/``, ``sdk/`` and ``config`` only.
"""

from bot.dispatcher import dispatch_updates, extract_bot_commands, process_update
from bot.processor import MessageProcessor
from bot.registry import CommandRegistry, registry
from bot.router import CommandRouter
from bot.server import BotServer

__all__ = [
    # Dispatcher
    "dispatch_updates",
    "extract_bot_commands",
    "process_update",
    # Processors
    "MessageProcessor",
    "CommandRouter",
    "BotServer",
    # Command registry
    "CommandRegistry",
    "registry",
]
