"""Command registry — single source of truth for command → handler mapping.

Handlers are bound with the ``@registry.register`` decorator in
:mod:`bot.handlers`; :class:`bot.router.CommandRouter` looks them up by the
``BotCommand.command`` string extracted by the dispatcher, and ``/help``
iterates the same entries.

Design:
- ``CommandHandler`` is a :class:`Protocol` describing the handler signature.
- ``CommandRegistry`` stores ``CommandEntry`` metadata and exposes lookup /
  iteration helpers.  It is a plain class so tests can build isolated
  registries; the module-level ``registry`` is the application's default.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

from sdk.models import BotCommand, Message

if TYPE_CHECKING:
    from bot.server import BotServer


# ── Handler protocol ─────────────────────────────────────────────────────────

@runtime_checkable
class CommandHandler(Protocol):
    """Handler invoked for one recognised command of a message."""
    def __call__(self, message: Message, command: BotCommand, server: BotServer) -> None: ...  # noqa: E704


# ── Registry entry ───────────────────────────────────────────────────────────

@dataclasses.dataclass(frozen=True, slots=True)
class CommandEntry:
    """Metadata for a single registered slash-command."""
    command: str              # e.g. "/status"
    description: str          # shown in /help
    handler: CommandHandler


# ── Registry ─────────────────────────────────────────────────────────────────

class CommandRegistry:
    """Command registry keyed by the full command text, slash included.

    Usage::

        registry = CommandRegistry()

        @registry.register("/ping", description="Ping")
        def handle_ping(message, command, server) -> None: ...

        # In the router:
        registry.dispatch(message, command, server)
    """

    def __init__(self) -> None:
        self._entries: dict[str, CommandEntry] = {}

    # ── decorator ────────────────────────────────────────────────────────

    def register(self, command: str, *, description: str) -> Callable[[CommandHandler], CommandHandler]:
        """Decorator that registers *handler* for *command*.

        Registering the same command twice replaces the earlier handler.
        """
        def decorator(func: CommandHandler) -> CommandHandler:
            self._entries[command] = CommandEntry(command=command, description=description, handler=func)
            return func
        return decorator

    # ── lookup helpers ───────────────────────────────────────────────────

    def get(self, command: str) -> CommandEntry | None:
        """Return the entry for *command*, or ``None``."""
        return self._entries.get(command)

    def entries(self) -> dict[str, CommandEntry]:
        """Return a copy of all registered commands, in registration order."""
        return dict(self._entries)

    def __contains__(self, command: object) -> bool:
        return command in self._entries

    def dispatch(self, message: Message, command: BotCommand, server: BotServer) -> bool:
        """Look up *command* and invoke its handler.

        Returns ``True`` if a handler was found and called, ``False`` otherwise.
        """
        entry = self._entries.get(command.command)
        if entry is None:
            return False
        entry.handler(message, command, server)
        return True


# Module-level default registry; bot.handlers registers into this one.
registry = CommandRegistry()
