from __future__ import annotations
from dataclasses import dataclass, field
from functools import reduce
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple
import logging
import numpy as np

from .config import PipelineConfig, SearchParams, validate_config
from .errors import MalformedStageError, SearchBoundExceeded
from .range_map import Interval, RangeMap, normalize_intervals

if TYPE_CHECKING:
    from .parsing import Almanac

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 65536

def _membership(values: np.ndarray, ranges: List[Interval]) -> np.ndarray:
    """Boolean mask of values lying in any of the (normalized) ranges."""
    if not ranges:
        return np.zeros(values.shape, dtype=bool)
    starts = np.array([s for (s, _) in ranges], dtype=np.int64)
    ends = np.array([e for (_, e) in ranges], dtype=np.int64)
    idx = np.searchsorted(starts, values, side="right") - 1
    safe = np.clip(idx, 0, None)
    return (idx >= 0) & (values < ends[safe])

@dataclass(frozen=True)
class Pipeline:
    """Ordered chain of RangeMaps.
    `domains` optionally names the len(stages) + 1 domains the chain passes
    through (e.g. seed, soil, ..., location); labels never affect translation.
    """
    stages: Tuple[RangeMap, ...] = ()
    domains: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.domains and len(self.domains) != len(self.stages) + 1:
            raise MalformedStageError(
                "%d stages need %d domain labels, got %d"
                % (len(self.stages), len(self.stages) + 1, len(self.domains))
            )

    def __len__(self) -> int:
        return len(self.stages)

    def domain_labels(self) -> List[str]:
        if self.domains:
            return list(self.domains)
        return ["stage%d" % i for i in range(len(self.stages) + 1)]

    # -----------------------------
    # Pointwise translation
    # -----------------------------
    def translate_forward(self, value: int) -> int:
        for stage in self.stages:
            value = stage.forward(value)
        return value

    def translate_inverse(self, value: int) -> int:
        for stage in reversed(self.stages):
            value = stage.inverse(value)
        return value

    def translate_forward_array(self, values) -> np.ndarray:
        out = np.asarray(values, dtype=np.int64)
        for stage in self.stages:
            out = stage.forward_array(out)
        return out

    def translate_inverse_array(self, values) -> np.ndarray:
        out = np.asarray(values, dtype=np.int64)
        for stage in reversed(self.stages):
            out = stage.inverse_array(out)
        return out

    # -----------------------------
    # Interval translation
    # -----------------------------
    def project_forward(self, intervals: Iterable[Interval]) -> List[Interval]:
        res = normalize_intervals(intervals)
        for stage in self.stages:
            res = stage.project_intervals_forward(res)
        return res

    def project_inverse(self, intervals: Iterable[Interval]) -> List[Interval]:
        res = normalize_intervals(intervals)
        for stage in reversed(self.stages):
            res = stage.project_intervals_inverse(res)
        return res

    def project_forward_stages(self, intervals: Iterable[Interval]) -> Dict[str, List[Interval]]:
        """Image of the intervals in every domain, keyed by domain label."""
        labels = self.domain_labels()
        res = normalize_intervals(intervals)
        out = {labels[0]: res}
        for label, stage in zip(labels[1:], self.stages):
            res = stage.project_intervals_forward(res)
            out[label] = res
        return out

    def collapse(self, name: Optional[str] = None) -> RangeMap:
        """Compose every stage into a single RangeMap."""
        composed = reduce(lambda acc, stage: acc.compose(stage), self.stages, RangeMap())
        return RangeMap(composed.spans, name)

    # -----------------------------
    # Minimization
    # -----------------------------
    def natural_horizon(self, value_ranges: Iterable[Interval]) -> int:
        """Past every span and range endpoint all stages are identity and no
        range can contain the value, so no answer lies at or above this."""
        points = [p for stage in self.stages for p in stage.breakpoints()]
        points.extend(e for (_, e) in value_ranges)
        return max(points, default=0)

    def minimize_over(
        self,
        value_ranges: Iterable[Interval],
        max_scan: Optional[int] = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> int:
        """Smallest final value y >= 0 whose inverse translation lies in value_ranges.
        Candidates are checked in ascending contiguous blocks, so the first hit
        is the global minimum.
        """
        ranges = normalize_intervals(value_ranges)
        horizon = self.natural_horizon(ranges)
        if max_scan is not None:
            horizon = min(horizon, int(max_scan))
        logger.debug("scanning final values [0, %d) in blocks of %d", horizon, block_size)
        for lo in range(0, horizon, block_size):
            ys = np.arange(lo, min(lo + block_size, horizon), dtype=np.int64)
            hits = np.flatnonzero(_membership(self.translate_inverse_array(ys), ranges))
            if hits.size:
                return int(ys[hits[0]])
        raise SearchBoundExceeded(horizon)

    def minimize_over_intervals(self, value_ranges: Iterable[Interval]) -> int:
        """Same query answered by pushing whole ranges through every stage."""
        ranges = normalize_intervals(value_ranges)
        projected = self.project_forward(ranges)
        if not projected:
            raise SearchBoundExceeded(self.natural_horizon(ranges))
        return projected[0][0]

    def minimize(self, value_ranges: Iterable[Interval], params: Optional[SearchParams] = None) -> int:
        params = params or SearchParams()
        if params.strategy == "intervals":
            return self.minimize_over_intervals(value_ranges)
        return self.minimize_over(value_ranges, params.max_scan, int(params.block_size))

@dataclass
class PipelineResult:
    seeds: List[int]
    value_ranges: List[Interval]
    # forward translation of each discrete seed
    seed_locations: List[int]
    lowest_seed_location: Optional[int]
    lowest_range_location: int
    # value ranges projected into every domain
    projected_ranges: Dict[str, List[Interval]] = field(default_factory=dict)

class AlmanacPipeline:
    def __init__(self, config: Optional[PipelineConfig] = None):
        self.cfg = validate_config(config or PipelineConfig())

    def run(self, almanac: "Almanac") -> PipelineResult:
        cfg = self.cfg
        pipe = almanac.pipeline

        # 1) Direct forward evaluation of every discrete seed
        locations = pipe.translate_forward_array(almanac.seeds).tolist() if almanac.seeds else []
        lowest = min(locations) if locations else None
        logger.info("lowest location over %d seeds: %s", len(locations), lowest)

        # 2) Minimization over the seed ranges
        best = pipe.minimize(almanac.value_ranges, cfg.search)
        logger.info("lowest location over %d seed ranges (%s): %d",
                    len(almanac.value_ranges), cfg.search.strategy, best)

        projected = pipe.project_forward_stages(almanac.value_ranges) if cfg.project_stages else {}

        return PipelineResult(
            seeds=list(almanac.seeds),
            value_ranges=list(almanac.value_ranges),
            seed_locations=locations,
            lowest_seed_location=lowest,
            lowest_range_location=best,
            projected_ranges=projected,
        )
