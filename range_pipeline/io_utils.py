from __future__ import annotations
from typing import Any, Dict, List, Union
import json
from pathlib import Path

from .range_map import Interval
from .parsing import Almanac, parse_almanac

def load_almanac(path: Union[str, Path]) -> Almanac:
    return parse_almanac(Path(path).read_text(encoding="utf-8"))

def save_intervals_json(spans: List[Interval], path: Union[str, Path]):
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([[int(a), int(b)] for (a, b) in spans], f, ensure_ascii=False, indent=2)

def save_projections_json(projected: Dict[str, List[Interval]], path: Union[str, Path]):
    """One entry per domain label, each a list of [start, end) pairs."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    data = {label: [[int(a), int(b)] for (a, b) in spans] for label, spans in projected.items()}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

def save_summary_json(summary: Dict[str, Any], path: Union[str, Path]):
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
