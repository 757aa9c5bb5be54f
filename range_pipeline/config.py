from dataclasses import dataclass, field
from typing import Optional, Literal
import yaml

from .errors import ConfigError

STRATEGIES = ("scan", "intervals")

@dataclass
class SearchParams:
    strategy: Literal["scan", "intervals"] = "scan"  # 'intervals' propagates whole ranges instead of scanning
    max_scan: Optional[int] = None    # candidates scanned are < max_scan; None = natural horizon only
    block_size: int = 65536           # candidates inverse-checked per numpy batch

@dataclass
class PipelineConfig:
    project_stages: bool = True       # also compute the value ranges' image in every domain
    log_level: str = "INFO"
    search: SearchParams = field(default_factory=SearchParams)

def validate_config(cfg: PipelineConfig) -> PipelineConfig:
    s = cfg.search
    if s.strategy not in STRATEGIES:
        raise ConfigError("unknown search strategy %r (expected one of %s)" % (s.strategy, ", ".join(STRATEGIES)))
    try:
        block_size = int(s.block_size)
        max_scan = None if s.max_scan is None else int(s.max_scan)
    except (TypeError, ValueError):
        raise ConfigError("block_size and max_scan must be integers, got %r and %r"
                          % (s.block_size, s.max_scan)) from None
    if block_size <= 0:
        raise ConfigError("block_size must be positive, got %r" % s.block_size)
    if max_scan is not None and max_scan < 0:
        raise ConfigError("max_scan must be non-negative, got %r" % s.max_scan)
    s.block_size, s.max_scan = block_size, max_scan
    return cfg

def load_config_yaml(path: str) -> PipelineConfig:
    """Load config from a YAML file into PipelineConfig dataclasses."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError("%s: invalid YAML: %s" % (path, exc)) from None
    if not isinstance(data, dict):
        raise ConfigError("%s: top level must be a mapping" % path)

    def merge_dataclass(dc_cls, values):
        obj = dc_cls()
        for k, v in (values or {}).items():
            if hasattr(obj, k):
                setattr(obj, k, v)
        return obj

    cfg = PipelineConfig(
        project_stages=data.get("project_stages", True),
        log_level=data.get("log_level", "INFO"),
        search=merge_dataclass(SearchParams, data.get("search")),
    )
    return validate_config(cfg)
