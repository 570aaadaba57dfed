"""
Order command: read a feed snapshot, apply the ordering heuristic, write JSON.

- Options come from the ``ordering`` section of the config; ``seed`` and
  ``variety`` can be overridden per run.
- Relative output paths are taken from the current working directory, like
  any other command-line path.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from ..core.config import ConfigManager
from ..core.feed_io import dump_entries, load_entries
from ..core.models import FeedEntry
from ..processors.feed_orderer import OrderingOptions, order_entries

logger = logging.getLogger(__name__)


def _load_options(cfg_mgr: ConfigManager, *, seed: Optional[int], variety: Optional[float]) -> OrderingOptions:
    """Build ordering options from config, applying CLI overrides."""
    options = OrderingOptions.from_mapping(cfg_mgr.get_ordering_options())
    if seed is not None:
        options = replace(options, seed=seed)
    if variety is not None:
        options = replace(options, variety_factor=variety)
    return options


def resolve_output_path(output_path: str) -> Path:
    """Return the absolute destination for *output_path*."""
    return Path(output_path).expanduser().resolve()


def run(
    config_path: Optional[str],
    input_path: str,
    output_path: Optional[str] = None,
    *,
    seed: Optional[int] = None,
    variety: Optional[float] = None,
) -> List[FeedEntry]:
    """
    Order the entries in *input_path* and optionally write them to *output_path*.

    Args:
        config_path: Path to main config (None uses the default location)
        input_path: JSON/YAML feed snapshot
        output_path: Optional JSON destination
        seed: Optional seed for the variety term
        variety: Optional variety_factor override in [0, 1]

    Returns:
        Ordered entries

    Raises:
        ValueError: If the configuration is invalid
        InvalidEntryError: If the snapshot is malformed
    """
    logger.info("Starting order command for %s", input_path)

    cfg_mgr = ConfigManager(config_path)
    if not cfg_mgr.validate_config():
        raise ValueError(f"Invalid configuration at {cfg_mgr.config_path}")

    options = _load_options(cfg_mgr, seed=seed, variety=variety)
    entries = load_entries(input_path)
    ordered = order_entries(entries, options)

    if output_path:
        target = resolve_output_path(output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        dump_entries(ordered, str(target))
        logger.info("Wrote ordered feed to %s", target)

    logger.info("Order command completed (%d entries)", len(ordered))
    return ordered
