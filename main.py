"""Entry point — build the transport, engine and router, then poll forever.

Run with ``python main.py`` after setting ``BOT_TOKEN`` (directly or in a
``.env`` file).  The calling thread becomes the poll worker.
"""

import sys

from config import BASE_URL, BATCH_LIMIT, BOT_PROXY, BOT_TOKEN, CONNECT_TIMEOUT, POLL_TIMEOUT, RETRY_DELAY
from core.engine import PollEngine
from core.logger import ReactorLogger
from sdk.client import HttpClient
from sdk.exceptions import InvalidCredential, PrincipalNotFound, TransportError, UnclassifiedServiceError
from bot.registry import registry
from bot.router import CommandRouter
from bot.server import BotServer

# Import handlers module so @registry.register decorators execute.
import bot.handlers as _handlers  # noqa: F401

logger = ReactorLogger.get_logger()


def build_server() -> BotServer:
    """Assemble a :class:`BotServer` from the loaded configuration."""
    transport = HttpClient(BASE_URL, proxy=BOT_PROXY, connect_timeout=CONNECT_TIMEOUT)
    engine = PollEngine(
        transport,
        batch_limit=BATCH_LIMIT,
        poll_timeout=POLL_TIMEOUT,
        retry_delay=RETRY_DELAY,
    )
    return BotServer(engine, CommandRouter(registry))


def main() -> int:
    """Run the bot on the current thread.  Returns the process exit code.

    Raises:
        EnvironmentError: If ``BOT_TOKEN`` is not set.
    """
    if not BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    server = build_server()
    logger.info("Reactor bot is starting. Polling for updates...")
    try:
        server.start(blocking=True)
    except (InvalidCredential, PrincipalNotFound) as exc:
        logger.critical("Bot token rejected, shutting down", extra={"error": str(exc), "error_kind": exc.kind.value})
        return 1
    except (UnclassifiedServiceError, TransportError) as exc:
        logger.critical("Could not validate bot token, shutting down", extra={"error": str(exc), "error_kind": exc.kind.value})
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping engine")
        server.stop()
    finally:
        server.engine.close()
    logger.info("Reactor bot stopped", extra={"cursor": server.cursor})
    return 0


if __name__ == "__main__":
    sys.exit(main())
