"""Core engine — logging, outgoing actions, the action queue and the poll loop.

This package may import from ``sdk/`` only.  It must NEVER import from ``bot/``.
"""

from core.logger import ReactorLogger
from core.actions import Action, ReplyMessage, SendMessage, SendVideo, SetChatTitle, execute_action
from core.action_queue import ActionQueue
from core.engine import EngineState, PollEngine

__all__ = [
    "ReactorLogger",
    "Action",
    "SendMessage",
    "ReplyMessage",
    "SetChatTitle",
    "SendVideo",
    "execute_action",
    "ActionQueue",
    "EngineState",
    "PollEngine",
]
