"""List windowing (virtualization) for long feeds.

Only the slice of an ordered list that covers the viewport, plus ``overscan``
extra items on each side, is mounted. A spacer of ``total_height_px`` keeps
the native scrollbar proportional to the full list and ``offset_top_px``
positions the mounted slice inside it.

:func:`compute_window` is the pure arithmetic. :class:`WindowingEngine` holds
the scroll position and geometry for one rendered list and recomputes the
window on scroll, resize and list replacement. Every recomputation is O(1) in
the list length, so it is safe to call from an unthrottled scroll handler.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Generic, List, Sequence, Tuple, TypeVar

from ..core.models import InvalidViewportError, LoadingPriority, ViewportWindow, WindowState

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _check_geometry(item_height: float, container_height: float, overscan: int) -> None:
    # NaN compares false against everything, so test finiteness first
    if item_height is None or not math.isfinite(item_height) or item_height <= 0:
        raise InvalidViewportError(f"item_height must be positive and finite, got {item_height!r}")
    if container_height is None or not math.isfinite(container_height) or container_height <= 0:
        raise InvalidViewportError(f"container_height must be positive and finite, got {container_height!r}")
    if overscan is None or not math.isfinite(overscan) or overscan < 0:
        raise InvalidViewportError(f"overscan must be a finite value >= 0, got {overscan!r}")


def _check_scroll_top(scroll_top: float) -> None:
    if scroll_top is None or not math.isfinite(scroll_top):
        raise InvalidViewportError(f"scroll_top must be finite, got {scroll_top!r}")


def visible_count(item_height: float, container_height: float, overscan: int) -> int:
    """Number of items past ``start_index`` that a window may cover."""
    return math.ceil(container_height / item_height) + 2 * overscan


def compute_window(
    scroll_top: float,
    item_height: float,
    overscan: int,
    container_height: float,
    item_count: int,
) -> ViewportWindow:
    """Compute the window of items to mount for a scroll position.

    Example:
        >>> compute_window(6000, 600, 3, 800, 500)
        ViewportWindow(start_index=7, end_index=15, offset_top_px=4200, total_height_px=300000)

    Raises:
        InvalidViewportError: On non-positive or non-finite heights, negative
            overscan, or a non-finite scroll offset.
    """
    _check_geometry(item_height, container_height, overscan)
    _check_scroll_top(scroll_top)
    if item_count <= 0:
        return ViewportWindow.empty()

    last = item_count - 1
    start = max(0, math.floor(max(0, scroll_top) / item_height) - overscan)
    # Scroll offsets past the end (list shrank under us) pin to the last item
    start = min(start, last)
    end = min(last, start + visible_count(item_height, container_height, overscan))
    return ViewportWindow(
        start_index=start,
        end_index=end,
        offset_top_px=start * item_height,
        total_height_px=item_count * item_height,
    )


class WindowingEngine(Generic[T]):
    """Tracks scroll state for one rendered list and exposes the mounted slice.

    Example:
        ```python
        engine = WindowingEngine(entries, item_height=600, overscan=2, container_height=1000)
        window = engine.on_scroll(event_scroll_top)
        for index, entry in engine.visible_items():
            render(entry, top=index * 600, priority=engine.loading_priority(index))
        ```
    """

    def __init__(
        self,
        items: Sequence[T],
        item_height: float,
        overscan: int = 2,
        container_height: float = 1000,
    ) -> None:
        _check_geometry(item_height, container_height, overscan)
        self.item_height = item_height
        self.overscan = int(overscan)
        self.container_height = container_height
        self._items: Sequence[T] = list(items)
        self._scroll_top: float = 0
        self._window = self._recompute()

    @property
    def items(self) -> Sequence[T]:
        return self._items

    @property
    def scroll_top(self) -> float:
        return self._scroll_top

    @property
    def window(self) -> ViewportWindow:
        return self._window

    @property
    def state(self) -> WindowState:
        return WindowState.WINDOWED if self._items else WindowState.EMPTY

    @property
    def max_scroll_top(self) -> float:
        return max(0, len(self._items) * self.item_height - self.container_height)

    def _recompute(self) -> ViewportWindow:
        return compute_window(
            self._scroll_top,
            self.item_height,
            self.overscan,
            self.container_height,
            len(self._items),
        )

    def on_scroll(self, scroll_top: float) -> ViewportWindow:
        """Record a new scroll offset and return the recomputed window.

        Raises:
            InvalidViewportError: If *scroll_top* is NaN or infinite; the
                previous offset is kept.
        """
        _check_scroll_top(scroll_top)
        self._scroll_top = max(0, scroll_top)
        self._window = self._recompute()
        return self._window

    def on_resize(self, container_height: float) -> ViewportWindow:
        """Apply a new viewport height and return the recomputed window.

        Raises:
            InvalidViewportError: If *container_height* is not positive and finite.
        """
        _check_geometry(self.item_height, container_height, self.overscan)
        self.container_height = container_height
        self._window = self._recompute()
        return self._window

    def on_items_changed(self, items: Sequence[T]) -> ViewportWindow:
        """Swap in a new list, keeping the scroll offset where it still fits."""
        previous = self.state
        self._items = list(items)
        if self._scroll_top > self.max_scroll_top:
            logger.debug(
                "List shrank to %d items; clamping scroll_top %s -> %s",
                len(self._items),
                self._scroll_top,
                self.max_scroll_top,
            )
            self._scroll_top = self.max_scroll_top
        self._window = self._recompute()
        if self.state is not previous:
            logger.debug("Windowing state %s -> %s", previous.value, self.state.value)
        return self._window

    def visible_items(self) -> List[Tuple[int, T]]:
        """Return ``(absolute_index, item)`` pairs for the mounted slice."""
        window = self._window
        if window.is_empty:
            return []
        return list(zip(window.indices(), self._items[window.start_index:window.end_index + 1]))

    def loading_priority(self, index: int) -> LoadingPriority:
        """Classify how eagerly the item at *index* should load its media.

        The first item intersecting the viewport loads immediately, the rest of
        the viewport loads at priority, overscan items load normally and
        anything else is lazy.
        """
        if not self._items or index < 0 or index >= len(self._items):
            return LoadingPriority.LAZY
        first_visible = min(len(self._items) - 1, math.floor(self._scroll_top / self.item_height))
        bottom = self._scroll_top + self.container_height
        last_visible = min(len(self._items) - 1, math.ceil(bottom / self.item_height) - 1)
        if index == first_visible:
            return LoadingPriority.IMMEDIATE
        if first_visible < index <= last_visible:
            return LoadingPriority.PRIORITY
        if self._window.start_index <= index <= self._window.end_index:
            return LoadingPriority.NORMAL
        return LoadingPriority.LAZY

    def render_stats(self) -> Dict[str, Any]:
        """Return how many items are mounted versus the list length."""
        total = len(self._items)
        rendered = self._window.rendered_count
        return {
            "rendered_count": rendered,
            "total_count": total,
            "render_ratio": (rendered / total) if total else 0.0,
        }


__all__ = ["compute_window", "visible_count", "WindowingEngine"]
