"""Tests for single-stage range maps and interval helpers."""

from __future__ import annotations

import numpy as np
import pytest

from range_pipeline import MalformedStageError, RangeMap, normalize_intervals, ranges_from_pairs


def _seed_to_soil() -> RangeMap:
    return RangeMap.from_rows([(50, 98, 2), (52, 50, 48)], "seed-to-soil")


def test_single_pair_stage() -> None:
    m = RangeMap.from_pairs([((98, 100), (50, 52))])
    assert m.forward(98) == 50
    assert m.forward(99) == 51
    assert m.forward(97) == 97
    assert m.forward(100) == 100
    assert m.inverse(51) == 99


def test_identity_fallback_outside_spans() -> None:
    m = _seed_to_soil()
    for v in (-5, 0, 49, 100, 10**12):
        assert m.forward(v) == v
        assert m.inverse(v) == v


def test_empty_map_is_identity() -> None:
    m = RangeMap.from_pairs([])
    assert len(m) == 0
    assert m.forward(42) == 42
    assert m.inverse(42) == 42


def test_stage_round_trip() -> None:
    m = _seed_to_soil()
    for v in range(-3, 110):
        assert m.inverse(m.forward(v)) == v
        assert m.forward(m.inverse(v)) == v


def test_overlapping_sources_first_span_wins() -> None:
    m = RangeMap.from_pairs([((0, 10), (100, 110)), ((5, 15), (200, 210))])
    assert m.forward(7) == 107
    assert m.forward(12) == 207


def test_mismatched_lengths_rejected() -> None:
    with pytest.raises(MalformedStageError):
        RangeMap.from_pairs([((0, 10), (100, 105))])


def test_empty_interval_rejected() -> None:
    with pytest.raises(MalformedStageError):
        RangeMap.from_pairs([((5, 5), (1, 1))])
    with pytest.raises(MalformedStageError):
        RangeMap.from_rows([(1, 2, 0)])


def test_array_lookups_match_scalar() -> None:
    m = _seed_to_soil()
    values = np.arange(40, 110)
    assert m.forward_array(values).tolist() == [m.forward(int(v)) for v in values]
    assert m.inverse_array(values).tolist() == [m.inverse(int(v)) for v in values]


def test_project_intervals_forward_splits_at_breakpoints() -> None:
    m = _seed_to_soil()
    # [45, 50) identity, [50, 98) -> [52, 100), [98, 100) -> [50, 52), [100, 105) identity
    assert m.project_intervals_forward([(45, 105)]) == [(45, 105)]
    assert m.project_intervals_forward([(96, 99)]) == [(50, 51), (98, 100)]
    assert m.project_intervals_inverse([(50, 51), (98, 100)]) == [(96, 99)]


def test_compose_matches_sequential_application() -> None:
    a = _seed_to_soil()
    b = RangeMap.from_rows([(0, 15, 37), (37, 52, 2), (39, 0, 15)])
    ab = a.compose(b, "seed-to-fertilizer")
    assert ab.name == "seed-to-fertilizer"
    for v in range(-2, 120):
        assert ab.forward(v) == b.forward(a.forward(v))
        assert ab.inverse(b.forward(a.forward(v))) == v


def test_breakpoints() -> None:
    assert _seed_to_soil().breakpoints() == [50, 52, 98, 100]


def test_normalize_intervals_merges_touching() -> None:
    assert normalize_intervals([(10, 12), (0, 3), (3, 5), (11, 20), (7, 7)]) == [(0, 5), (10, 20)]


def test_ranges_from_pairs() -> None:
    assert ranges_from_pairs([79, 14, 55, 13]) == [(79, 93), (55, 68)]
    with pytest.raises(MalformedStageError):
        ranges_from_pairs([1, 2, 3])
    with pytest.raises(MalformedStageError):
        ranges_from_pairs([1, 0])


def test_project_intervals_respects_first_match_on_overlap() -> None:
    m = RangeMap.from_pairs([((5, 15), (100, 110)), ((0, 10), (200, 210))])
    assert m.project_intervals_forward([(0, 15)]) == [(100, 110), (200, 205)]
    image = {m.forward(v) for v in range(-3, 20)}
    expected = set()
    for (s, e) in m.project_intervals_forward([(-3, 20)]):
        expected.update(range(s, e))
    assert image == expected


def test_project_intervals_inverse_respects_first_match_on_overlap() -> None:
    m = RangeMap.from_pairs([((100, 110), (5, 15)), ((200, 210), (0, 10))])
    assert m.project_intervals_inverse([(0, 15)]) == [(100, 110), (200, 205)]
