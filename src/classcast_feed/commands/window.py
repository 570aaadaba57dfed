"""
Window command: compute the mounted slice of a feed for one scroll position.

Geometry defaults come from the ``windowing`` config section. The snapshot is
optionally passed through the ordering heuristic first so indices match what
the feed would actually show.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core.config import ConfigManager
from ..core.feed_io import load_entries
from ..core.models import LOAD_DELAYS_MS
from ..processors.feed_orderer import OrderingOptions, order_entries
from ..processors.windowing import WindowingEngine

logger = logging.getLogger(__name__)


def build_report(engine: WindowingEngine) -> Dict[str, Any]:
    """Summarize the engine's current window for display or JSON output."""
    visible = engine.visible_items()
    priorities = [(index, item, engine.loading_priority(index)) for index, item in visible]
    return {
        "state": engine.state.value,
        "scrollTop": engine.scroll_top,
        "window": engine.window.to_dict(),
        "visible": [
            {
                "index": index,
                "id": getattr(item, "id", None),
                "loadingPriority": priority.value,
                "loadDelayMs": LOAD_DELAYS_MS[priority],
            }
            for index, item, priority in priorities
        ],
        "stats": engine.render_stats(),
    }


def run(
    config_path: Optional[str],
    input_path: str,
    scroll_top: float,
    *,
    container_height: Optional[float] = None,
    item_height: Optional[float] = None,
    overscan: Optional[int] = None,
    apply_ordering: bool = True,
) -> Dict[str, Any]:
    """
    Compute the window for *scroll_top* over the feed in *input_path*.

    Args:
        config_path: Path to main config (None uses the default location)
        input_path: JSON/YAML feed snapshot
        scroll_top: Scroll offset in pixels
        container_height: Viewport height override
        item_height: Item height override
        overscan: Overscan override
        apply_ordering: Order the snapshot before windowing

    Returns:
        Report dict with the window, visible ids, loading priorities and stats

    Raises:
        ValueError: If the configuration is invalid
        InvalidViewportError: If the geometry is not positive
    """
    cfg_mgr = ConfigManager(config_path)
    if not cfg_mgr.validate_config():
        raise ValueError(f"Invalid configuration at {cfg_mgr.config_path}")

    geometry = cfg_mgr.get_windowing_options()
    if container_height is not None:
        geometry["container_height"] = container_height
    if item_height is not None:
        geometry["item_height"] = item_height
    if overscan is not None:
        geometry["overscan"] = overscan

    entries = load_entries(input_path)
    if apply_ordering:
        entries = order_entries(entries, OrderingOptions.from_mapping(cfg_mgr.get_ordering_options()))

    engine = WindowingEngine(
        entries,
        item_height=geometry["item_height"],
        overscan=geometry["overscan"],
        container_height=geometry["container_height"],
    )
    engine.on_scroll(scroll_top)
    report = build_report(engine)
    logger.info(
        "Window for scrollTop=%s: items %d-%d of %d",
        scroll_top,
        engine.window.start_index,
        engine.window.end_index,
        len(entries),
    )
    return report
