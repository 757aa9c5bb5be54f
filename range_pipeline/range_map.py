from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import numpy as np

from .errors import MalformedStageError

logger = logging.getLogger(__name__)

# Half-open [start, end)
Interval = Tuple[int, int]
# (src_start, src_end, dst_start, dst_end)
Span = Tuple[int, int, int, int]

def normalize_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Sort, drop empty, and merge overlapping or touching intervals."""
    xs = []
    for a, b in intervals:
        s, e = (int(a), int(b))
        if s > e:
            s, e = e, s
        if s == e:
            continue
        xs.append((s, e))
    if not xs:
        return []
    xs.sort(key=lambda x: x[0])
    merged = []
    cs, ce = xs[0]
    for s, e in xs[1:]:
        if s <= ce:
            ce = max(ce, e)
        else:
            merged.append((cs, ce))
            cs, ce = s, e
    merged.append((cs, ce))
    return merged

def ranges_from_pairs(values: Sequence[int]) -> List[Interval]:
    """Read a flat list as (start, length) pairs and build intervals from it."""
    if len(values) % 2:
        raise MalformedStageError("expected (start, length) pairs, got %d values" % len(values))
    out = []
    for start, length in zip(values[0::2], values[1::2]):
        if length <= 0:
            raise MalformedStageError("range starting at %d has non-positive length %d" % (start, length))
        out.append((start, start + length))
    return out

def interval_contains(intervals: Iterable[Interval], value: int) -> bool:
    return any(s <= value < e for (s, e) in intervals)

def _lookup(value: int, spans: Sequence[Span]) -> int:
    for (fs, fe, ts, _) in spans:
        if fs <= value < fe:
            return ts + (value - fs)
    return value

def _lookup_array(values, spans: Sequence[Span]) -> np.ndarray:
    x = np.asarray(values, dtype=np.int64)
    out = x.copy()
    matched = np.zeros(x.shape, dtype=bool)
    for (fs, fe, ts, _) in spans:
        hit = ~matched & (x >= fs) & (x < fe)
        out[hit] = x[hit] + (ts - fs)
        matched |= hit
    return out

def _project(intervals: Iterable[Interval], spans: Sequence[Span]) -> List[Interval]:
    res = []
    for (s, e) in intervals:
        cur = s
        while cur < e:
            for i, (fs, fe, ts, _) in enumerate(spans):
                if fs <= cur < fe:
                    # map this chunk within [fs, fe); an earlier span starting inside takes over there
                    chunk_end = min([e, fe] + [ps for (ps, _, _, _) in spans[:i] if cur < ps < fe])
                    res.append((ts + (cur - fs), ts + (chunk_end - fs)))
                    cur = chunk_end
                    break
            else:
                # uncovered -> identity up to the next covered span
                next_start = min((fs for (fs, _, _, _) in spans if fs > cur), default=e)
                chunk_end = min(e, next_start)
                res.append((cur, chunk_end))
                cur = chunk_end
    return normalize_intervals(res)

@dataclass(frozen=True)
class RangeMap:
    """One translation stage.
    Stores spans: tuples of (src_start, src_end, dst_start, dst_end), half-open.
    Values outside every source span map to themselves. Source spans are expected
    to be disjoint; if they overlap, the first span in construction order wins.
    """
    spans: Tuple[Span, ...] = ()
    name: Optional[str] = None

    def __post_init__(self):
        for (ss, se, ds, de) in self.spans:
            if se <= ss:
                raise MalformedStageError("empty source interval [%d, %d)" % (ss, se))
            if se - ss != de - ds:
                raise MalformedStageError(
                    "source [%d, %d) and destination [%d, %d) differ in length" % (ss, se, ds, de)
                )

    @staticmethod
    def from_pairs(pairs: Iterable[Tuple[Interval, Interval]], name: Optional[str] = None) -> "RangeMap":
        spans = tuple((int(src[0]), int(src[1]), int(dst[0]), int(dst[1])) for (src, dst) in pairs)
        return RangeMap(spans, name)

    @staticmethod
    def from_rows(rows: Iterable[Tuple[int, int, int]], name: Optional[str] = None) -> "RangeMap":
        """Build from (destination_start, source_start, length) rows."""
        spans = []
        for (dst, src, length) in rows:
            if length <= 0:
                raise MalformedStageError("non-positive span length %d" % length)
            spans.append((src, src + length, dst, dst + length))
        return RangeMap(tuple(spans), name)

    def __len__(self) -> int:
        return len(self.spans)

    @property
    def sources(self) -> List[Interval]:
        return [(ss, se) for (ss, se, _, _) in self.spans]

    @property
    def destinations(self) -> List[Interval]:
        return [(ds, de) for (_, _, ds, de) in self.spans]

    def _inverse_spans(self) -> List[Span]:
        return [(ds, de, ss, se) for (ss, se, ds, de) in self.spans]

    def forward(self, value: int) -> int:
        return _lookup(value, self.spans)

    def inverse(self, value: int) -> int:
        return _lookup(value, self._inverse_spans())

    def forward_array(self, values) -> np.ndarray:
        return _lookup_array(values, self.spans)

    def inverse_array(self, values) -> np.ndarray:
        return _lookup_array(values, self._inverse_spans())

    def project_intervals_forward(self, intervals: Iterable[Interval]) -> List[Interval]:
        """Map intervals on the source side to the destination side."""
        return _project(intervals, self.spans)

    def project_intervals_inverse(self, intervals: Iterable[Interval]) -> List[Interval]:
        """Map intervals on the destination side back to the source side."""
        return _project(intervals, self._inverse_spans())

    def breakpoints(self) -> List[int]:
        pts = set()
        for span in self.spans:
            pts.update(span)
        return sorted(pts)

    def compose(self, other: "RangeMap", name: Optional[str] = None) -> "RangeMap":
        """Return a map equivalent to applying self then other.
        self: A -> B; other: B -> C; result: A -> C
        """
        # Every A value that self moves, or that lands in one of other's sources.
        regions = list(self.sources)
        for src in other.sources:
            # one span at a time so neighbouring pre-images keep their cut point
            regions.extend(self.project_intervals_inverse([src]))
        cuts = sorted({p for iv in regions for p in iv})
        composed = []
        for a, b in zip(cuts, cuts[1:]):
            if not interval_contains(regions, a):
                continue
            out = other.forward(self.forward(a))
            composed.append((a, b, out, out + (b - a)))
        # merge adjacent pieces sharing the same offset
        merged = []
        for seg in composed:
            if merged:
                (pi_s, pi_e, po_s, po_e) = merged[-1]
                (ci_s, ci_e, co_s, co_e) = seg
                if pi_e == ci_s and po_e == co_s:
                    merged[-1] = (pi_s, ci_e, po_s, co_e)
                    continue
            merged.append(seg)
        logger.debug("composed %s with %s into %d spans", self.name, other.name, len(merged))
        return RangeMap(tuple(merged), name)
