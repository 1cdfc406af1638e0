"""Configuration for the budget manager engine.

Values are read once from environment variables at import time, with
defaults suitable for a single-user desktop install.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# Per-user data location (XDG), never inside the installed package
_USER_DATA_HOME = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

DATA_DIR = Path(os.getenv("BUDGET_MANAGER_DATA_DIR", _USER_DATA_HOME / "budget_manager"))

DB_PATH = Path(
    os.getenv("BUDGET_MANAGER_DB_PATH", DATA_DIR / "budget.db")
).resolve()

# Budget opened on start-up when the caller does not name one
DEFAULT_BUDGET_NAME = os.getenv("BUDGET_MANAGER_DEFAULT_BUDGET", "main")

# Decimal places every stored and reported amount is rounded to
DISPLAY_PRECISION = int(os.getenv("BUDGET_MANAGER_PRECISION", "2"))

LOG_LEVEL = os.getenv("BUDGET_MANAGER_LOG_LEVEL", "WARNING")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def ensure_data_directories() -> None:
    """Create the data directory and the database's parent if missing."""
    for directory in [DATA_DIR, DB_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for an application embedding the engine.

    The library itself never calls this; hosts do, once, at start-up.
    """
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


def get_db_path() -> str:
    return str(DB_PATH)
