"""Poll engine — the fetch → dispatch → drain cycle.

The engine owns the polling cursor and the outgoing :class:`ActionQueue`.  One
worker runs the whole cycle:

1. fetch a batch of updates starting at the cursor (long poll);
2. move the cursor past the highest ``update_id`` in the batch, *before*
   anything else sees it, so a crash during dispatch never re-delivers the
   batch (at-most-once);
3. hand the batch to the updates callback, which may enqueue actions;
4. execute every queued action in FIFO order.

A failed fetch aborts the cycle with the cursor untouched.  A failed action is
logged and the drain carries on with the next one, whatever it raised; the
worker only exits once a stop was requested.  ``stop()`` is cooperative
and only observed between cycles.
"""

from __future__ import annotations

import concurrent.futures
import enum
import threading
from typing import TYPE_CHECKING, Callable, List, Optional, Union

from core.action_queue import ActionQueue
from core.actions import Action, action_name, execute_action
from core.logger import ReactorLogger
from sdk.codec import Codec
from sdk.exceptions import APIException, TransportError
from sdk.models import Update, User

if TYPE_CHECKING:
    from sdk.client import HttpClient

logger = ReactorLogger.get_logger()

UpdatesCallback = Callable[[List[Update]], None]


class EngineState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class PollEngine:
    """Long-polling worker bound to one transport.

    Args:
        transport: The HTTP capability (see :class:`sdk.client.HttpClient`).
        codec: Envelope decoder; a fresh :class:`Codec` by default.
        batch_limit: Maximum updates requested per fetch.
        poll_timeout: Seconds the service may hold a fetch open.
        retry_delay: Pause after a failed fetch.  ``0`` retries immediately.
    """

    BATCH_LIMIT: int = 100
    POLL_TIMEOUT: int = 15

    def __init__(
        self,
        transport: HttpClient,
        codec: Optional[Codec] = None,
        *,
        batch_limit: int = BATCH_LIMIT,
        poll_timeout: int = POLL_TIMEOUT,
        retry_delay: float = 0.0,
    ) -> None:
        self._transport = transport
        self._codec = codec if codec is not None else Codec()
        self._batch_limit = batch_limit
        self._poll_timeout = poll_timeout
        self._retry_delay = retry_delay

        self._queue = ActionQueue()
        self._cursor = 0
        self._state = EngineState.IDLE
        self._state_lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._on_updates: Optional[UpdatesCallback] = None
        self._worker: Union[threading.Thread, concurrent.futures.Future, None] = None

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def cursor(self) -> int:
        """Smallest ``update_id`` not yet acknowledged."""
        return self._cursor

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def pending_actions(self) -> int:
        return len(self._queue)

    def is_ready_to_destroy(self) -> bool:
        """True once the worker has exited.

        An engine that was never started (``IDLE``) also reports ``True``: it
        owns no worker, so there is nothing to wait for before :meth:`close`.
        While a worker is ``RUNNING`` or ``STOPPING`` this is ``False``.
        """
        return self._state in (EngineState.IDLE, EngineState.STOPPED)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(
        self,
        on_updates: UpdatesCallback,
        blocking: bool = False,
        executor: Optional[concurrent.futures.Executor] = None,
    ) -> None:
        """Validate the token, then run the poll loop.

        With *blocking* the loop runs on the calling thread and this method
        returns only after :meth:`stop`.  Otherwise the loop is submitted to
        *executor*, or to a daemon thread owned by the engine when no
        executor is given.

        Raises:
            InvalidCredential: The service rejected the token.
            PrincipalNotFound: The bot does not exist.
            UnclassifiedServiceError: Any other service failure during validation.
            TransportError: The validation request did not complete.
        """
        self._on_updates = on_updates
        self.validate_credentials()

        self._stop_requested.clear()
        with self._state_lock:
            self._state = EngineState.RUNNING

        if blocking:
            self._run_loop()
        elif executor is not None:
            self._worker = executor.submit(self._run_loop)
        else:
            thread = threading.Thread(target=self._run_loop, name="reactor-poll", daemon=True)
            self._worker = thread
            thread.start()

    def validate_credentials(self) -> User:
        """Call ``getMe`` once and return the bot's own :class:`User`."""
        logger.info("Checking bot token")
        try:
            me = self._codec.decode(self._transport.identify(), User)
        except (APIException, TransportError) as exc:
            logger.critical("Token check failed, engine not started", extra={"error": str(exc), "error_kind": exc.kind.value})
            raise
        logger.info("Token accepted", extra={"bot_id": me.id, "bot_name": me.first_name})
        return me

    def stop(self) -> None:
        """Ask the worker to exit after the current cycle.  Never blocks."""
        with self._state_lock:
            # A worker that already exited keeps STOPPED.
            if self._state is EngineState.RUNNING:
                self._state = EngineState.STOPPING
        self._stop_requested.set()
        logger.info("Stop requested", extra={"cursor": self._cursor})

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait up to *timeout* seconds for a detached worker to exit."""
        worker = self._worker
        if isinstance(worker, threading.Thread):
            worker.join(timeout)
        elif isinstance(worker, concurrent.futures.Future):
            concurrent.futures.wait([worker], timeout=timeout)
        return self.is_ready_to_destroy()

    def close(self) -> None:
        """Release the transport's connections."""
        self._transport.close()

    # ------------------------------------------------------------------
    # Action queue
    # ------------------------------------------------------------------

    def enqueue_action(self, action: Action) -> None:
        """Queue *action* for the next drain.  Never performs I/O."""
        self._queue.push(action)
        logger.debug("Action queued", extra={"action": action_name(action), "pending": len(self._queue)})

    def drain(self) -> int:
        """Execute every queued action, oldest first.

        Returns:
            The number of actions that failed.
        """
        total = len(self._queue)
        if not total:
            return 0

        logger.info("Processing outgoing actions", extra={"pending": total})
        failures = 0
        position = 0
        while True:
            action = self._queue.pop()
            if action is None:
                break
            position += 1
            try:
                execute_action(action, self._transport, self._codec)
            except (APIException, TransportError, OSError) as exc:
                failures += 1
                logger.error(
                    "Outgoing action failed",
                    extra={"action": action_name(action), "chat_id": action.chat.id, "position": position, "error": str(exc)},
                )
            except Exception:
                failures += 1
                logger.exception(
                    "Outgoing action raised",
                    extra={"action": action_name(action), "chat_id": action.chat.id, "position": position},
                )
            else:
                logger.debug("Outgoing action done", extra={"action": action_name(action), "chat_id": action.chat.id, "position": position})
        return failures

    # ------------------------------------------------------------------
    # Poll cycle
    # ------------------------------------------------------------------

    def fetch_updates(self) -> List[Update]:
        """Fetch one batch starting at the cursor.  The cursor is not moved.

        Raises:
            APIException: The service answered with ``ok: false``.
            TransportError: The request did not complete.
        """
        body = self._transport.fetch(self._cursor, self._batch_limit, self._poll_timeout)
        return self._codec.decode_updates(body)

    def run_cycle(self) -> int:
        """Run one fetch → advance → dispatch → drain iteration.

        Returns:
            The number of updates fetched (``0`` on an empty batch or a
            failed fetch).
        """
        try:
            updates = self.fetch_updates()
        except (APIException, TransportError) as exc:
            logger.warning(
                "Fetch failed, cycle aborted",
                extra={"cursor": self._cursor, "error": str(exc), "error_kind": exc.kind.value},
            )
            self._pause_after_failed_fetch()
            return 0
        except Exception:
            logger.exception("Fetch raised, cycle aborted", extra={"cursor": self._cursor})
            self._pause_after_failed_fetch()
            return 0

        if not updates:
            return 0

        logger.info("Received updates", extra={"count": len(updates), "cursor": self._cursor})
        self._advance_cursor(updates)
        self._dispatch(updates)
        self.drain()
        return len(updates)

    def _pause_after_failed_fetch(self) -> None:
        # stop() ends the pause early.
        if self._retry_delay > 0:
            self._stop_requested.wait(self._retry_delay)

    def _advance_cursor(self, updates: List[Update]) -> None:
        top_id = max(update.update_id for update in updates)
        logger.info("Cursor advanced", extra={"previous_cursor": self._cursor, "cursor": top_id + 1})
        self._cursor = top_id + 1

    def _dispatch(self, updates: List[Update]) -> None:
        if self._on_updates is None:
            return
        try:
            self._on_updates(updates)
        except Exception:
            # The batch is already acknowledged; it will not be fetched again.
            logger.exception(
                "Updates callback raised, batch dropped",
                extra={"first_update_id": updates[0].update_id, "cursor": self._cursor},
            )

    def _run_loop(self) -> None:
        logger.info("Poll loop started", extra={"cursor": self._cursor})
        try:
            while not self._stop_requested.is_set():
                self.run_cycle()
        finally:
            with self._state_lock:
                self._state = EngineState.STOPPED
            logger.info("Poll loop stopped", extra={"cursor": self._cursor})
