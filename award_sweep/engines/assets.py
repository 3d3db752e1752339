"""Saving raw search assets (HTML pages, JSON responses) to disk."""

import gzip
import json
import logging
import os
from typing import Any

from ..models import Query

logger = logging.getLogger(__name__)


def append_path(path: str, suffix: str) -> str:
    """Insert suffix before the first '.' of the file name.

    >>> append_path("/data/SQ-SIN-HKG.html.gz", "-2")
    '/data/SQ-SIN-HKG-2.html.gz'
    """
    if not path:
        return path
    head, base = os.path.split(path)
    pos = base.find(".")
    if pos < 0:
        pos = len(base)
    return os.path.join(head, base[:pos] + suffix + base[pos:])


class AssetWriter:
    """Writes the assets of one query next to the paths the planner assigned.

    Engines compose this service; each saved asset gets its own file, named
    after the query's base path plus an asset id.
    """

    def __init__(self, query: Query):
        self.query = query
        self.html_assets: list[str] = []
        self.json_assets: list[str] = []

    def save_html(self, asset_id: str, contents: str) -> str:
        path = self._write(self.query.html_path, asset_id, contents.encode("utf-8"))
        self.html_assets.append(path)
        return path

    def save_json(self, asset_id: str, data: Any) -> str:
        path = self._write(self.query.json_path, asset_id, json.dumps(data).encode("utf-8"))
        self.json_assets.append(path)
        return path

    def _write(self, base_path: str, asset_id: str, payload: bytes) -> str:
        if not base_path:
            raise ValueError(f"Query has no asset path for '{asset_id}'")
        path = append_path(base_path, f"-{asset_id}")
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        if path.endswith(".gz"):
            payload = gzip.compress(payload)
        with open(path, "wb") as fp:
            fp.write(payload)
        logger.debug(f"Saved asset {path} ({len(payload)} bytes)")
        return path
