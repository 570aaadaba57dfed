import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from classcast_feed.core.models import FeedEntry, InvalidEntryError  # noqa: E402
from classcast_feed.processors import feed_orderer  # noqa: E402
from classcast_feed.processors.feed_orderer import (  # noqa: E402
    OrderingOptions,
    dedupe_authors,
    order_entries,
    score_entries,
)


NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

# Everything off: only recency contributes
PLAIN = OrderingOptions(
    prioritize_unresolved=False,
    variety_factor=0.0,
    cost_awareness=False,
    pinned_first=False,
)


def make_entry(entry_id, author="a", *, days_old=0.0, status="submitted", media=None, pinned=False):
    return FeedEntry(
        id=entry_id,
        author_id=author,
        submitted_at=NOW - timedelta(days=days_old),
        status=status,
        media_ref=media,
        pinned=pinned,
    )


def ids(entries):
    return [e.id for e in entries]


def test_empty_input_returns_empty_list():
    assert order_entries([], PLAIN, now=NOW) == []
    assert score_entries([], PLAIN, now=NOW) == []


def test_single_entry_is_returned_unchanged():
    entry = make_entry("only")
    assert order_entries([entry], OrderingOptions(variety_factor=1.0), now=NOW) == [entry]


def test_same_author_equal_scores_keep_input_order():
    entries = [make_entry("1", "A"), make_entry("2", "A"), make_entry("3", "A")]
    assert ids(order_entries(entries, PLAIN, now=NOW)) == ["1", "2", "3"]


def test_recency_orders_newest_first():
    entries = [
        make_entry("old", "a", days_old=10),
        make_entry("new", "b", days_old=1),
        make_entry("mid", "c", days_old=5),
    ]
    assert ids(order_entries(entries, PLAIN, now=NOW)) == ["new", "mid", "old"]


def test_recency_bonus_floors_at_zero():
    scored = score_entries(
        [make_entry("ancient", days_old=400), make_entry("future", "b", days_old=-3)],
        PLAIN,
        now=NOW,
    )
    assert scored[0].score == 0.0
    # Future timestamps count as brand new
    assert scored[1].score == pytest.approx(PLAIN.recency_max_bonus)


def test_unresolved_entry_scores_strictly_higher():
    options = OrderingOptions(prioritize_unresolved=True, variety_factor=0.0, cost_awareness=False)
    graded = make_entry("graded", status="graded")
    pending = make_entry("pending", "b", status="submitted")
    scored = {s.entry.id: s.score for s in score_entries([graded, pending], options, now=NOW)}
    assert scored["pending"] > scored["graded"]
    assert scored["pending"] - scored["graded"] == pytest.approx(feed_orderer.UNRESOLVED_BONUS)


def test_unresolved_first_beats_recency():
    options = OrderingOptions(prioritize_unresolved=True, variety_factor=0.0, cost_awareness=False)
    entries = [
        make_entry("fresh-graded", "a", days_old=0, status="graded"),
        make_entry("old-pending", "b", days_old=30, status="pending"),
    ]
    assert ids(order_entries(entries, options, now=NOW)) == ["old-pending", "fresh-graded"]


def test_cost_awareness_prefers_cheaper_media_tiers():
    options = OrderingOptions(prioritize_unresolved=False, variety_factor=0.0, cost_awareness=True)
    entries = [
        make_entry("unknown", "a", media="https://example.com/page"),
        make_entry("hosted", "b", media="https://bucket.s3.amazonaws.com/v/clip.mp4"),
        make_entry("youtube", "c", media="https://www.youtube.com/watch?v=xyz"),
    ]
    assert ids(order_entries(entries, options, now=NOW)) == ["youtube", "hosted", "unknown"]


def test_zero_variety_is_deterministic():
    options = OrderingOptions(variety_factor=0.0)
    entries = [make_entry(str(i), f"author-{i % 4}", days_old=i % 7) for i in range(40)]
    first = order_entries(entries, options, now=NOW)
    second = order_entries(entries, options, now=NOW)
    assert ids(first) == ids(second)


def test_seeded_variety_is_reproducible():
    options = OrderingOptions(prioritize_unresolved=False, cost_awareness=False, variety_factor=1.0, seed=7)
    entries = [make_entry(str(i), f"author-{i}") for i in range(25)]
    assert ids(order_entries(entries, options, now=NOW)) == ids(order_entries(entries, options, now=NOW))


def test_variety_uses_supplied_generator():
    options = OrderingOptions(prioritize_unresolved=False, cost_awareness=False, variety_factor=1.0)
    entries = [make_entry(str(i), f"author-{i}") for i in range(10)]
    scored = score_entries(entries, options, now=NOW, rng=np.random.default_rng(3))
    expected = np.random.default_rng(3).random(10) * feed_orderer.VARIETY_SCALE + PLAIN.recency_max_bonus
    assert [s.score for s in scored] == pytest.approx(expected.tolist())


@pytest.mark.parametrize("variety", [0.0, 0.5, 1.0])
def test_output_is_a_permutation(variety):
    entries = [
        make_entry(str(i), f"author-{i % 3}", days_old=i, status="graded" if i % 2 else "submitted")
        for i in range(30)
    ]
    ordered = order_entries(entries, OrderingOptions(variety_factor=variety, seed=11), now=NOW)
    assert len(ordered) == len(entries)
    assert sorted(ids(ordered)) == sorted(ids(entries))


def test_pinned_entries_come_first():
    options = OrderingOptions(prioritize_unresolved=True, variety_factor=0.0, cost_awareness=False)
    entries = [
        make_entry("pending", "a", status="submitted"),
        make_entry("pinned", "b", status="graded", days_old=50, pinned=True),
    ]
    assert ids(order_entries(entries, options, now=NOW)) == ["pinned", "pending"]
    no_pins = OrderingOptions(prioritize_unresolved=True, variety_factor=0.0, cost_awareness=False, pinned_first=False)
    assert ids(order_entries(entries, no_pins, now=NOW)) == ["pending", "pinned"]


def test_dedupe_swaps_duplicate_with_first_new_author():
    entries = [
        make_entry("1", "A"),
        make_entry("2", "A"),
        make_entry("3", "A"),
        make_entry("4", "B"),
        make_entry("5", "C"),
    ]
    assert ids(dedupe_authors(entries, 5)) == ["1", "4", "5", "2", "3"]


def test_dedupe_reaches_beyond_window_for_alternative():
    entries = [make_entry(str(i), "A") for i in range(1, 7)] + [make_entry("7", "B")]
    result = dedupe_authors(entries, 3)
    assert ids(result)[:2] == ["1", "7"]
    assert sorted(ids(result)) == sorted(ids(entries))


def test_dedupe_is_noop_when_single_author():
    entries = [make_entry(str(i), "A") for i in range(6)]
    assert ids(dedupe_authors(entries, 5)) == ids(entries)


def test_dedupe_leaves_tail_untouched_and_respects_window():
    entries = [make_entry("1", "A"), make_entry("2", "B"), make_entry("3", "A"), make_entry("4", "C")]
    assert ids(dedupe_authors(entries, 2)) == ["1", "2", "3", "4"]
    assert ids(dedupe_authors(entries, 0)) == ["1", "2", "3", "4"]


def test_dedupe_ignores_missing_authors():
    entries = [make_entry("1", None), make_entry("2", None), make_entry("3", "A")]
    assert ids(dedupe_authors(entries, 5)) == ["1", "2", "3"]


def test_order_applies_dedupe_window():
    entries = [make_entry("a1", "A", days_old=0), make_entry("a2", "A", days_old=1), make_entry("b1", "B", days_old=2)]
    assert ids(order_entries(entries, PLAIN, now=NOW)) == ["a1", "b1", "a2"]
    no_dedupe = OrderingOptions(
        prioritize_unresolved=False, variety_factor=0.0, cost_awareness=False, pinned_first=False, dedupe_window=0
    )
    assert ids(order_entries(entries, no_dedupe, now=NOW)) == ["a1", "a2", "b1"]


def test_duplicate_ids_are_rejected():
    with pytest.raises(InvalidEntryError, match="duplicate id 'x'"):
        order_entries([make_entry("x"), make_entry("x", "b")], PLAIN, now=NOW)


def test_missing_timestamp_is_rejected():
    broken = FeedEntry(id="x", submitted_at=None)  # type: ignore[arg-type]
    with pytest.raises(InvalidEntryError, match="submitted_at"):
        order_entries([broken], PLAIN, now=NOW)


@pytest.mark.parametrize(
    "kwargs",
    [{"variety_factor": 1.5}, {"variety_factor": -0.1}, {"dedupe_window": -1}, {"recency_decay_per_day": -1}],
)
def test_invalid_options_raise(kwargs):
    with pytest.raises(ValueError):
        OrderingOptions(**kwargs)


def test_options_from_mapping_ignores_unknown_keys():
    options = OrderingOptions.from_mapping({"variety_factor": 0.0, "dedupe_window": 3, "unknown": True})
    assert options.variety_factor == 0.0
    assert options.dedupe_window == 3
    assert OrderingOptions.from_mapping(None) == OrderingOptions()


def test_pinned_block_stays_ahead_of_author_dedupe():
    entries = [
        make_entry("p1", "A", pinned=True),
        make_entry("p2", "A", days_old=1, pinned=True),
        make_entry("u1", "B", days_old=2),
    ]
    options = OrderingOptions(prioritize_unresolved=False, variety_factor=0.0, cost_awareness=False)
    assert ids(order_entries(entries, options, now=NOW)) == ["p1", "p2", "u1"]


def test_authors_are_spread_within_pinned_block():
    entries = [
        make_entry("p1", "A", pinned=True),
        make_entry("p2", "A", days_old=1, pinned=True),
        make_entry("p3", "B", days_old=2, pinned=True),
        make_entry("u1", "C", days_old=3),
    ]
    options = OrderingOptions(prioritize_unresolved=False, variety_factor=0.0, cost_awareness=False)
    assert ids(order_entries(entries, options, now=NOW)) == ["p1", "p3", "p2", "u1"]


def test_unpinned_slots_avoid_authors_already_pinned():
    entries = [
        make_entry("p1", "A", pinned=True),
        make_entry("u1", "A", days_old=1),
        make_entry("u2", "B", days_old=2),
    ]
    options = OrderingOptions(prioritize_unresolved=False, variety_factor=0.0, cost_awareness=False)
    assert ids(order_entries(entries, options, now=NOW)) == ["p1", "u2", "u1"]


def test_locked_positions_are_never_swapped():
    entries = [make_entry("1", "A"), make_entry("2", "A"), make_entry("3", "B")]
    assert ids(dedupe_authors(entries, 5, locked=2)) == ["1", "2", "3"]
