"""Loyalty-program login credentials.

Credentials live in a JSON file keyed by airline code, one entry per
account::

    {
        "SQ": [
            {"username": "8812345678", "password": "..."},
            {"username": "8887654321", "password": "..."}
        ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Optional

from . import config
from .errors import SetupError

logger = logging.getLogger(__name__)


def load_accounts(path: Optional[Path] = None) -> dict[str, list[dict]]:
    path = Path(path or config.ACCOUNTS_FILE)
    if not path.exists():
        raise SetupError(f"No accounts file found at {path}")
    try:
        with open(path) as fp:
            data = json.load(fp)
    except (OSError, json.JSONDecodeError) as e:
        raise SetupError(f"Cannot read accounts file {path}: {e}") from e
    if not isinstance(data, dict):
        raise SetupError(f"Accounts file {path} must contain an object keyed by airline")
    return {key.upper(): value for key, value in data.items()}


def get_credentials(
    engine_id: str,
    index: int = 0,
    path: Optional[Path] = None,
) -> tuple[str, str]:
    """Return (username, password) for the index-th account of an airline."""
    accounts = load_accounts(path).get(engine_id.upper(), [])
    if index < 0 or index >= len(accounts):
        raise SetupError(
            f"No account #{index} configured for {engine_id} "
            f"({len(accounts)} account(s) available)"
        )
    entry = accounts[index]
    username, password = entry.get("username"), entry.get("password")
    if not username or not password:
        raise SetupError(f"Account #{index} for {engine_id} is missing a username or password")
    logger.debug(f"Using account #{index} ({username}) for {engine_id}")
    return username, password
