"""Tests for YAML config loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from range_pipeline import ConfigError, PipelineConfig, load_config_yaml, validate_config


def test_defaults() -> None:
    cfg = PipelineConfig()
    assert cfg.search.strategy == "scan"
    assert cfg.search.max_scan is None
    assert cfg.project_stages is True
    assert PipelineConfig().search is not cfg.search


def test_load_config_yaml(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "log_level: DEBUG\n"
        "project_stages: false\n"
        "search:\n"
        "  strategy: intervals\n"
        "  max_scan: 1000\n"
        "  unknown_key: 3\n",
        encoding="utf-8",
    )
    cfg = load_config_yaml(str(path))
    assert cfg.log_level == "DEBUG"
    assert cfg.project_stages is False
    assert cfg.search.strategy == "intervals"
    assert cfg.search.max_scan == 1000
    assert cfg.search.block_size == 65536


def test_load_empty_config_yaml(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config_yaml(str(path)) == PipelineConfig()


def test_invalid_strategy_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("search:\n  strategy: bisect\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config_yaml(str(path))


def test_invalid_block_size_rejected() -> None:
    cfg = PipelineConfig()
    cfg.search.block_size = 0
    with pytest.raises(ConfigError):
        validate_config(cfg)


def test_non_integer_block_size_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad_block.yaml"
    path.write_text("search:\n  block_size: lots\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config_yaml(str(path))


def test_integer_strings_are_coerced() -> None:
    cfg = PipelineConfig()
    cfg.search.block_size = "128"
    cfg.search.max_scan = "1000"
    validate_config(cfg)
    assert cfg.search.block_size == 128
    assert cfg.search.max_scan == 1000


def test_unparsable_yaml_rejected(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("search: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config_yaml(str(path))
