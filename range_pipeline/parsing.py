"""Two-pass parser for almanac text.

The text is first split into blocks at blank lines and header lines; each stage block is
then turned into an immutable RangeMap on its own.

    seeds: 79 14 55 13

    seed-to-soil map:
    50 98 2
    52 50 48
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging
import re

from .errors import MalformedStageError
from .pipeline import Pipeline
from .range_map import Interval, RangeMap, ranges_from_pairs

logger = logging.getLogger(__name__)

Line = Tuple[int, str]  # (1-based line number, stripped text)

_HEADER_RE = re.compile(r"^(?P<src>\S+)-to-(?P<dst>\S+)\s+map\s*:$")

@dataclass(frozen=True)
class Almanac:
    seeds: List[int]
    value_ranges: List[Interval]
    pipeline: Pipeline

def split_blocks(text: str) -> List[List[Line]]:
    blocks: List[List[Line]] = []
    cur: List[Line] = []
    for no, raw in enumerate(text.splitlines(), start=1):
        ln = raw.strip()
        if not ln:
            if cur:
                blocks.append(cur)
                cur = []
            continue
        if ln.endswith(":") and cur:
            # a header opens a new stage even without a blank line before it
            blocks.append(cur)
            cur = []
        cur.append((no, ln))
    if cur:
        blocks.append(cur)
    return blocks

def _parse_ints(text: str, line_no: Optional[int]) -> List[int]:
    try:
        return [int(tok) for tok in text.split()]
    except ValueError:
        raise MalformedStageError("non-numeric token in %r" % text, line_no) from None

def parse_seed_line(line: str, line_no: Optional[int] = None) -> List[int]:
    """`seeds: 79 14 55 13` -> [79, 14, 55, 13]; the label is optional."""
    _, _, values = line.rpartition(":")
    return _parse_ints(values, line_no)

def seeds_to_ranges(values: List[int], line_no: Optional[int] = None) -> List[Interval]:
    try:
        return ranges_from_pairs(values)
    except MalformedStageError as exc:
        raise MalformedStageError(str(exc), line_no) from None

def parse_stage_block(lines: List[Line]) -> Tuple[RangeMap, Optional[Tuple[str, str]]]:
    """Build one stage from its header and rows.
    Returns the RangeMap and the (source, destination) domain labels when the
    header has the `<src>-to-<dst> map:` form.
    """
    if not lines:
        raise MalformedStageError("empty stage block")
    head_no, header = lines[0]
    if not header.endswith(":"):
        raise MalformedStageError("expected a stage header ending in ':', got %r" % header, head_no)
    m = _HEADER_RE.match(header)
    name = header[:-1].strip()
    domains = None
    if m:
        name = "%s-to-%s" % (m.group("src"), m.group("dst"))
        domains = (m.group("src"), m.group("dst"))

    rows = []
    for no, ln in lines[1:]:
        nums = _parse_ints(ln, no)
        if len(nums) != 3:
            raise MalformedStageError(
                "expected 'destination_start source_start length', got %d values" % len(nums), no
            )
        if nums[2] <= 0:
            raise MalformedStageError("non-positive span length %d" % nums[2], no)
        rows.append(tuple(nums))
    return RangeMap.from_rows(rows, name), domains

def parse_almanac(text: str) -> Almanac:
    blocks = split_blocks(text)
    if not blocks:
        raise MalformedStageError("empty almanac")

    seed_block = blocks[0]
    if len(seed_block) != 1:
        raise MalformedStageError("seed block must be a single line", seed_block[0][0])
    seed_no, seed_line = seed_block[0]
    seeds = parse_seed_line(seed_line, seed_no)
    value_ranges = seeds_to_ranges(seeds, seed_no)

    stages = []
    labels: List[Optional[Tuple[str, str]]] = []
    for block in blocks[1:]:
        stage, domains = parse_stage_block(block)
        stages.append(stage)
        labels.append(domains)

    chain: Tuple[str, ...] = ()
    if stages and all(labels):
        chain = (labels[0][0],)
        for (block, (src, dst)) in zip(blocks[1:], labels):
            if src != chain[-1]:
                raise MalformedStageError(
                    "stage %s-to-%s does not continue from domain %r" % (src, dst, chain[-1]), block[0][0]
                )
            chain += (dst,)

    logger.debug("parsed %d seeds, %d stages (%s)", len(seeds), len(stages), " -> ".join(chain) or "unlabelled")
    return Almanac(seeds=seeds, value_ranges=value_ranges, pipeline=Pipeline(tuple(stages), chain))
