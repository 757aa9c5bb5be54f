from .errors import RangePipelineError, MalformedStageError, SearchBoundExceeded, ConfigError
from .config import SearchParams, PipelineConfig, load_config_yaml, validate_config
from .range_map import Interval, RangeMap, normalize_intervals, ranges_from_pairs, interval_contains
from .pipeline import Pipeline, AlmanacPipeline, PipelineResult
from .parsing import Almanac, split_blocks, parse_seed_line, seeds_to_ranges, parse_stage_block, parse_almanac
from .plotting import plot_domain_ranges
from .io_utils import load_almanac, save_intervals_json, save_projections_json, save_summary_json
