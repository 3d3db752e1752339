"""Filesystem layout, defaults and the validated search configuration."""

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

DATA_DIR = Path(os.environ.get("AWARD_SWEEP_HOME", Path.home() / ".award-sweep"))
DB_FILE = DATA_DIR / "awards.db"
ASSETS_DIR = DATA_DIR / "assets"
ACCOUNTS_FILE = DATA_DIR / "accounts.json"

# Seconds to wait after the remote site reports we were blocked
DEFAULT_BACKOFF = (65, 320)

# Ordered from lowest to highest service level
CABINS = ("economy", "premium", "business", "first")


def cabin_rank(cabin: Optional[str]) -> int:
    """Service level of a cabin, -1 when unknown."""
    try:
        return CABINS.index(cabin)
    except ValueError:
        return -1


@dataclass
class SearchOptions:
    """Search configuration handed to the planner and controller.

    Built by the CLI after validation: dates are already clamped to the
    engine's searchable range.
    """
    website: str
    origin: str
    destination: str
    cabin: str
    start: date
    end: date
    quantity: int = 1
    account: int = 0
    oneway: bool = False
    partners: bool = False
    headless: bool = False
    parse: bool = True
    reverse: bool = False
    terminate: int = 0
    force: bool = False
    backoff: tuple[float, float] = DEFAULT_BACKOFF

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1
