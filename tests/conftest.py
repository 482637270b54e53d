"""Shared test setup."""

import os

# Keep test runs from writing logs/reactor.log; console output only.
os.environ.setdefault("LOG_DIR", "")
