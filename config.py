"""Application configuration — environment variables and derived constants.

Loads the bot token, proxy, polling parameters, the ``/auth`` allow-list
and the ``/get_video`` file from the environment via ``python-dotenv``.  All
values are resolved at import time so other modules can ``from config import
…`` without repeated lookups.  ``LOG_LEVEL`` and ``LOG_DIR`` are read by :mod:`core.logger`.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os
from typing import Callable, TypeVar

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── Environment bootstrap ────────────────────────────────────────────────────
# Must run before the logger is first built so LOG_LEVEL / LOG_DIR apply.
load_dotenv()

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import ReactorLogger  # noqa: E402

logger = ReactorLogger.get_logger()

N = TypeVar("N", int, float)

API_ROOT: str = "https://api.telegram.org"


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_number(name: str, default: N, cast: Callable[[str], N]) -> N:
    """Read a non-negative number from environment variable *name*.

    Missing, empty, non-numeric or negative values fall back to *default*.
    """
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning("Invalid numeric setting, using default", extra={"setting": name, "value": raw, "default": default})
        return default
    if value < 0:
        logger.warning("Negative numeric setting, using default", extra={"setting": name, "value": raw, "default": default})
        return default
    return value


def _optional(name: str) -> str | None:
    """Return the stripped value of *name*, or ``None`` when unset or blank."""
    value = os.environ.get(name, "").strip()
    return value or None


def _parse_user_ids(raw: str | None) -> list[int]:
    """Parse a comma-separated list of Telegram user IDs.

    Non-numeric tokens are skipped with a warning.
    """
    if not raw:
        return []
    result: list[int] = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            result.append(int(token))
        except ValueError:
            logger.warning("Skipping invalid user ID", extra={"token": token})
    return result


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = _optional("BOT_TOKEN")
BOT_PROXY: str | None = _optional("BOT_PROXY")
BASE_URL: str = f"{API_ROOT}/bot{BOT_TOKEN or ''}"
VIDEO_PATH: str | None = _optional("VIDEO_PATH")
AUTHORIZED_USERS: list[int] = _parse_user_ids(os.environ.get("AUTHORIZED_USERS"))

POLL_TIMEOUT: int = _parse_number("POLL_TIMEOUT", 15, int)
BATCH_LIMIT: int = _parse_number("BATCH_LIMIT", 100, int) or 100
CONNECT_TIMEOUT: float = _parse_number("CONNECT_TIMEOUT", 5.0, float)
RETRY_DELAY: float = _parse_number("RETRY_DELAY", 0.0, float)


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set, BASE_URL ready")
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set")

if BOT_PROXY:
    logger.info("BOT_PROXY configured", extra={"proxy": BOT_PROXY})

if VIDEO_PATH:
    logger.info("VIDEO_PATH configured", extra={"video_path": VIDEO_PATH})
else:
    logger.warning("No VIDEO_PATH configured; /get_video will decline")

if AUTHORIZED_USERS:
    logger.info("AUTHORIZED_USERS loaded", extra={"authorized_users": AUTHORIZED_USERS})
else:
    logger.warning("No AUTHORIZED_USERS configured; /auth will refuse everyone")

logger.info(
    "Polling parameters resolved",
    extra={
        "poll_timeout": POLL_TIMEOUT,
        "batch_limit": BATCH_LIMIT,
        "connect_timeout": CONNECT_TIMEOUT,
        "retry_delay": RETRY_DELAY,
    },
)
