"""BotServer — the engine handle handed to message processors.

Wires a :class:`~core.engine.PollEngine` to a
:class:`~bot.processor.MessageProcessor` through :mod:`bot.dispatcher`, and
exposes the outgoing operations processors use.  Every outgoing operation only
enqueues; nothing is sent until the engine drains its queue at the end of the
current cycle.
"""

from __future__ import annotations

import concurrent.futures
from typing import List, Optional

from core.actions import ReplyMessage, SendMessage, SendVideo, SetChatTitle
from core.engine import PollEngine
from core.logger import ReactorLogger
from sdk.models import Chat, Message, Update
from bot.dispatcher import dispatch_updates
from bot.processor import MessageProcessor

logger = ReactorLogger.get_logger()


class BotServer:
    """Application-facing facade over one poll engine and one processor."""

    def __init__(self, engine: PollEngine, processor: MessageProcessor) -> None:
        self._engine = engine
        self._processor = processor

    @property
    def engine(self) -> PollEngine:
        return self._engine

    @property
    def cursor(self) -> int:
        return self._engine.cursor

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self, blocking: bool = False, executor: Optional[concurrent.futures.Executor] = None) -> None:
        """Validate the token and start polling.  See :meth:`PollEngine.start`."""
        logger.info("Starting bot server", extra={"blocking": blocking})
        self._engine.start(self.on_updates, blocking=blocking, executor=executor)

    def stop(self) -> None:
        self._engine.stop()

    def is_ready_to_destroy(self) -> bool:
        return self._engine.is_ready_to_destroy()

    def on_updates(self, updates: List[Update]) -> None:
        """Updates callback registered with the engine."""
        logger.info("Processing update batch", extra={"count": len(updates)})
        dispatch_updates(self._processor, updates, self)

    # ── Outgoing operations (enqueue only) ───────────────────────────────

    def send_message(self, chat: Chat, text: str) -> None:
        self._engine.enqueue_action(SendMessage(chat=chat, text=text))

    def reply_message(self, chat: Chat, message: Message, text: str) -> None:
        """Queue *text* as a reply to *message* in *chat*."""
        self._engine.enqueue_action(ReplyMessage(chat=chat, target=message, text=text))

    def set_chat_title(self, chat: Chat, title: str) -> None:
        self._engine.enqueue_action(SetChatTitle(chat=chat, title=title))

    def send_video(self, chat: Chat, file_path: str) -> None:
        """Queue an upload of the local video at *file_path*."""
        self._engine.enqueue_action(SendVideo(chat=chat, file_path=file_path))
