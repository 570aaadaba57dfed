"""Reading and writing feed snapshots.

A snapshot file is either a JSON/YAML list of entry records or an object that
wraps the list under ``entries``, ``feed`` or ``submissions`` (the shapes the
ClassCast API routes return).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional

import yaml

from .models import FeedEntry, InvalidEntryError, validate_entries

logger = logging.getLogger(__name__)

_WRAPPER_KEYS = ("entries", "feed", "submissions")


def _unwrap(data: Any, source: str) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in _WRAPPER_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    raise InvalidEntryError(
        f"{source}: expected a list of entries or an object with one of {', '.join(_WRAPPER_KEYS)}"
    )


def parse_entries(records: Iterable[Any], source: str = "<memory>") -> List[FeedEntry]:
    """Convert raw records into validated ``FeedEntry`` objects."""
    entries = [FeedEntry.from_dict(raw, index=i) for i, raw in enumerate(records)]
    validate_entries(entries)
    logger.debug("Parsed %d entries from %s", len(entries), source)
    return entries


def load_entries(path: str) -> List[FeedEntry]:
    """Load a feed snapshot from a JSON or YAML file.

    Raises:
        FileNotFoundError: If *path* does not exist.
        InvalidEntryError: If the file shape or any entry is malformed.
    """
    file_path = Path(path).expanduser()
    with open(file_path, 'r', encoding='utf-8') as f:
        if file_path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    entries = parse_entries(_unwrap(data, str(file_path)), str(file_path))
    logger.info("Loaded %d feed entries from %s", len(entries), file_path)
    return entries


def dump_entries(entries: Iterable[FeedEntry], path: Optional[str] = None) -> str:
    """Serialize entries to JSON; also write to *path* when given."""
    payload = json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False, default=str)
    if path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(payload + "\n", encoding="utf-8")
        logger.info("Wrote ordered feed to %s", target)
    return payload


__all__ = ["load_entries", "parse_entries", "dump_entries"]
