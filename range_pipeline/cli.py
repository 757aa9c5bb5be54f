#!/usr/bin/env python3
import argparse, json, logging, sys
from pathlib import Path

from range_pipeline import (
    PipelineConfig, load_config_yaml, validate_config, AlmanacPipeline, RangePipelineError,
    plot_domain_ranges, load_almanac, save_intervals_json, save_projections_json, save_summary_json
)

log = logging.getLogger("range_pipeline.cli")

def build_argparser():
    ap = argparse.ArgumentParser(description="Multi-stage range remapping: seeds -> final locations")
    ap.add_argument("almanac", type=str, help="Text file with a seed line followed by stage blocks")
    ap.add_argument("--config", type=str, default="", help="YAML config file (optional)")
    ap.add_argument("--strategy", choices=["scan", "intervals"], default=None, help="Override search strategy")
    ap.add_argument("--max-scan", type=int, default=None, help="Upper bound on scanned final values")
    ap.add_argument("--no-projections", action="store_true", help="Skip per-domain range projections")
    ap.add_argument("--output-dir", type=str, default="outputs", help="Directory to store results")
    ap.add_argument("--plot", action="store_true", help="Show plots interactively")
    ap.add_argument("--save-plots", action="store_true", help="Save plots as PNGs in output-dir")
    ap.add_argument("--log-level", type=str, default=None, help="Logging level (DEBUG, INFO, ...)")
    return ap

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def _level(name):
    return getattr(logging, str(name).upper(), logging.INFO)

def load_cli_config(args) -> PipelineConfig:
    """Config file (if any) with command-line overrides applied, validated."""
    if args.config:
        cfg = load_config_yaml(args.config)
    else:
        cfg = PipelineConfig()

    if args.strategy:
        cfg.search.strategy = args.strategy
    if args.max_scan is not None:
        cfg.search.max_scan = args.max_scan
    if args.no_projections:
        cfg.project_stages = False
    if args.log_level:
        cfg.log_level = args.log_level
    return validate_config(cfg)

def main(argv=None):
    args = build_argparser().parse_args(argv)
    out_dir = Path(args.output_dir); out_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(level=_level(args.log_level or "INFO"), format=LOG_FORMAT)

    try:
        cfg = load_cli_config(args)
        logging.getLogger().setLevel(_level(cfg.log_level))
        almanac = load_almanac(args.almanac)
        res = AlmanacPipeline(cfg).run(almanac)
    except RangePipelineError as exc:
        log.error("%s", exc)
        return 1

    save_intervals_json(res.value_ranges, out_dir / "value_ranges.json")
    if res.projected_ranges:
        save_projections_json(res.projected_ranges, out_dir / "projected_ranges.json")

    if (args.save_plots or args.plot) and res.projected_ranges:
        plot_domain_ranges(
            res.projected_ranges,
            title="Value ranges through every stage",
            show=args.plot,
            save_path=str(out_dir / "plot_ranges.png") if args.save_plots else None
        )

    # Summary
    summary = {
        "seeds_count": len(res.seeds),
        "ranges_count": len(res.value_ranges),
        "stages_count": len(almanac.pipeline),
        "domains": almanac.pipeline.domain_labels(),
        "strategy": cfg.search.strategy,
        "lowest_seed_location": res.lowest_seed_location,
        "lowest_range_location": res.lowest_range_location,
    }
    save_summary_json(summary, out_dir / "summary.json")
    print(json.dumps(summary))
    return 0

if __name__ == "__main__":
    sys.exit(main())
