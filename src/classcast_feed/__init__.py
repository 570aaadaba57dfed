from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from .commands import order as order_cmd
from .commands import window as window_cmd
from .core.config import ConfigManager, DEFAULT_CONFIG_PATH
from .core.models import (
    FeedEntry,
    InvalidEntryError,
    InvalidViewportError,
    LoadingPriority,
    ViewportWindow,
    WindowState,
)
from .processors.feed_orderer import OrderingOptions, dedupe_authors, order_entries, score_entries
from .processors.windowing import WindowingEngine, compute_window

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = str(DEFAULT_CONFIG_PATH)

__all__ = [
    'order',
    'window',
    'status',
    'FeedEntry',
    'ViewportWindow',
    'WindowState',
    'LoadingPriority',
    'InvalidEntryError',
    'InvalidViewportError',
    'OrderingOptions',
    'order_entries',
    'score_entries',
    'dedupe_authors',
    'compute_window',
    'WindowingEngine',
]


def order(
    input_path: str,
    output_path: Optional[str] = None,
    *,
    seed: Optional[int] = None,
    variety: Optional[float] = None,
    config_path: Optional[str] = None,
) -> List[FeedEntry]:
    """Order a feed snapshot file programmatically.

    Args:
        input_path: JSON/YAML feed snapshot.
        output_path: Optional JSON destination (relative to the working directory).
        seed: Optional seed for the variety term.
        variety: Optional variety_factor override.
        config_path: Path to main YAML config; defaults to the data dir config.
    """
    cfg_path = config_path or _DEFAULT_CONFIG
    return order_cmd.run(cfg_path, input_path, output_path, seed=seed, variety=variety)


def window(
    input_path: str,
    scroll_top: float = 0,
    *,
    container_height: Optional[float] = None,
    item_height: Optional[float] = None,
    overscan: Optional[int] = None,
    apply_ordering: bool = True,
    config_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the window report for one scroll position over a feed snapshot."""
    cfg_path = config_path or _DEFAULT_CONFIG
    return window_cmd.run(
        cfg_path,
        input_path,
        scroll_top,
        container_height=container_height,
        item_height=item_height,
        overscan=overscan,
        apply_ordering=apply_ordering,
    )


def status(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Return configuration status for programmatic use."""
    cfg_path = config_path or _DEFAULT_CONFIG
    info: Dict[str, Any] = {'config_path': cfg_path}
    if not os.path.exists(cfg_path):
        info.update({'valid': False, 'error': f'Config file not found: {cfg_path}'})
        return info
    try:
        cm = ConfigManager(cfg_path)
        valid = cm.validate_config()
        info.update({
            'valid': bool(valid),
            'ordering': cm.get_ordering_options() if valid else {},
            'windowing': cm.get_windowing_options() if valid else {},
        })
        return info
    except Exception as e:
        logger.error("Status check failed for %s: %s", cfg_path, e)
        info.update({'valid': False, 'error': str(e)})
        return info
