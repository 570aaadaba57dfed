"""Feed ordering heuristic.

Produces the presentation order for a feed snapshot. Each entry gets an
additive score built from independent bonuses:

- a large fixed bonus for unresolved (ungraded) entries,
- a tiered bonus for media that is cheap to show first,
- a recency bonus that decays linearly with age and stops at zero,
- a uniform random term scaled by ``variety_factor``.

Entries are stable-sorted by descending score, pinned entries are lifted to
the front, and finally the first ``dedupe_window`` slots are rearranged so the
same author does not appear twice there when another author is available.

The scoring is vectorised with numpy; the random term comes from a
``numpy.random.Generator`` so callers (and tests) can pass a seeded one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

import numpy as np

from ..core.media import tier_bonus
from ..core.models import FeedEntry, ScoredEntry, validate_entries

logger = logging.getLogger(__name__)

UNRESOLVED_BONUS = 1000.0
VARIETY_SCALE = 50.0
_SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class OrderingOptions:
    """Knobs for :func:`order_entries` (mirrors the ``ordering`` config section)."""

    prioritize_unresolved: bool = True
    variety_factor: float = 0.1
    cost_awareness: bool = True
    dedupe_window: int = 5
    pinned_first: bool = True
    recency_max_bonus: float = 20.0
    recency_decay_per_day: float = 1.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.variety_factor) <= 1.0:
            raise ValueError(f"variety_factor must be within [0, 1], got {self.variety_factor}")
        if int(self.dedupe_window) < 0:
            raise ValueError(f"dedupe_window must be >= 0, got {self.dedupe_window}")
        if self.recency_max_bonus < 0 or self.recency_decay_per_day < 0:
            raise ValueError("recency_max_bonus and recency_decay_per_day must be >= 0")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "OrderingOptions":
        """Build options from a config mapping, ignoring unknown keys."""
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


def _make_rng(options: OrderingOptions, rng: Optional[np.random.Generator]) -> Optional[np.random.Generator]:
    if options.variety_factor <= 0:
        return None
    if rng is not None:
        return rng
    return np.random.default_rng(options.seed)


def score_entries(
    entries: Iterable[FeedEntry],
    options: Optional[OrderingOptions] = None,
    *,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[ScoredEntry]:
    """Compute an ordering score for each entry, preserving input order.

    Args:
        entries: Feed snapshot; validated before scoring.
        options: Ordering options (defaults when omitted).
        now: Reference time for recency; defaults to the current UTC time.
        rng: Optional generator for the variety term. When omitted a new one is
            seeded from ``options.seed``.

    Returns:
        List of ``ScoredEntry`` in the same order as *entries*.

    Raises:
        InvalidEntryError: If any entry is malformed or ids repeat.
    """
    opts = options or OrderingOptions()
    items = validate_entries(entries)
    if not items:
        return []

    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    count = len(items)
    scores = np.zeros(count, dtype=np.float64)

    if opts.prioritize_unresolved:
        unresolved = np.fromiter((e.is_unresolved for e in items), dtype=bool, count=count)
        scores += np.where(unresolved, UNRESOLVED_BONUS, 0.0)

    if opts.cost_awareness:
        scores += np.fromiter((tier_bonus(e.media_ref) for e in items), dtype=np.float64, count=count)

    # Future timestamps count as brand new
    ages_days = np.fromiter(
        ((reference - e.submitted_at).total_seconds() / _SECONDS_PER_DAY for e in items),
        dtype=np.float64,
        count=count,
    )
    ages_days = np.clip(ages_days, 0.0, None)
    scores += np.clip(opts.recency_max_bonus - opts.recency_decay_per_day * ages_days, 0.0, None)

    generator = _make_rng(opts, rng)
    if generator is not None:
        scores += generator.random(count) * (VARIETY_SCALE * float(opts.variety_factor))

    return [ScoredEntry(entry=e, score=float(s)) for e, s in zip(items, scores.tolist())]


def dedupe_authors(entries: Iterable[FeedEntry], window: int = 5, *, locked: int = 0) -> List[FeedEntry]:
    """Spread authors across the first *window* positions.

    Scans positions left to right; when an author already appeared earlier in
    the window, the entry is swapped with the first later entry (possibly past
    the window) whose author has not appeared yet. With no such entry the
    duplicate stays where it is. Entries without an author never count as
    duplicates.

    The first *locked* positions are never moved; their authors still count
    as already shown for the positions after them.
    """
    items = list(entries)
    fixed = max(0, int(locked))
    limit = min(max(0, int(window)), len(items))
    seen: set = set()
    swaps = 0
    for i in range(limit):
        author = items[i].author_id
        if i >= fixed and author is not None and author in seen:
            for j in range(i + 1, len(items)):
                candidate = items[j].author_id
                if candidate is None or candidate not in seen:
                    items[i], items[j] = items[j], items[i]
                    swaps += 1
                    break
        if items[i].author_id is not None:
            seen.add(items[i].author_id)
    if swaps:
        logger.debug("Author de-duplication performed %d swap(s) in top %d", swaps, limit)
    return items


def order_entries(
    entries: Iterable[FeedEntry],
    options: Optional[OrderingOptions] = None,
    *,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[FeedEntry]:
    """Return a presentation order for *entries* (always a permutation).

    Raises:
        InvalidEntryError: If any entry is malformed or ids repeat.
    """
    opts = options or OrderingOptions()
    scored = score_entries(entries, opts, now=now, rng=rng)
    if len(scored) <= 1:
        return [s.entry for s in scored]

    values = np.fromiter((s.score for s in scored), dtype=np.float64, count=len(scored))
    # Stable sort keeps input order among equal scores
    order = np.argsort(-values, kind="stable")
    ranked = [scored[i].entry for i in order.tolist()]

    locked = 0
    if opts.pinned_first:
        pinned = [e for e in ranked if e.pinned]
        if pinned:
            # Pinned block is de-duplicated on its own and then frozen
            pinned = dedupe_authors(pinned, opts.dedupe_window)
            ranked = pinned + [e for e in ranked if not e.pinned]
            locked = len(pinned)

    ranked = dedupe_authors(ranked, opts.dedupe_window, locked=locked)
    logger.info(
        "Ordered %d entries (%d unresolved, %d pinned)",
        len(ranked),
        sum(1 for e in ranked if e.is_unresolved),
        sum(1 for e in ranked if e.pinned),
    )
    return ranked


__all__ = [
    "UNRESOLVED_BONUS",
    "VARIETY_SCALE",
    "OrderingOptions",
    "score_entries",
    "dedupe_authors",
    "order_entries",
]
