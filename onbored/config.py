"""Configuration loading for onbored (.onbored.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".onbored.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Optional AI enrichment settings."""

    provider: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass
class ScanLimits:
    """Caps applied by the individual scans.

    The ``*_index_lines`` values bound the occurrence indexes used by the
    dead-code scan. Raising them improves recall at a linear cost in scan time.
    """

    history_depth: int = 500
    contributor_limit: int = 10
    churn_top_n: int = 15
    evidence_cap: int = 8
    component_index_lines: int = 1000
    export_index_lines: int = 500
    file_index_lines: int = 800
    monthly_buckets: int = 6


@dataclass
class AnalyzerConfig:
    """Analyzer enablement."""

    enabled: List[str] = field(default_factory=list)


@dataclass
class OnboredConfig:
    """Represents the settings defined in .onbored.yml."""

    root: Path
    llm: Optional[LLMConfig] = None
    limits: ScanLimits = field(default_factory=ScanLimits)
    analyzers: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    exclude_paths: List[str] = field(default_factory=list)
    output_dir: Optional[Path] = None


def load_config(config_path: Path) -> OnboredConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return OnboredConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = None
    if llm_data:
        llm = LLMConfig(
            provider=_as_str(llm_data.get("provider")),
            model=_as_str(llm_data.get("model")),
            base_url=_as_str(llm_data.get("base_url")),
            api_key=_as_str(llm_data.get("api_key")),
            temperature=_as_float(llm_data.get("temperature")),
            max_tokens=_as_int(llm_data.get("max_tokens")),
            request_timeout=_as_float(llm_data.get("request_timeout")),
        )
        if not any(getattr(llm, item.name) is not None for item in fields(llm)):
            llm = None

    limits = ScanLimits()
    for key, value in _as_dict(data.get("limits")).items():
        if not hasattr(limits, key):
            raise ConfigError(f"Unknown limit '{key}' in {CONFIG_FILENAME}")
        number = _as_int(value)
        if number is None or number < 0:
            raise ConfigError(f"Limit '{key}' must be a non-negative integer")
        setattr(limits, key, number)

    analyzers = AnalyzerConfig()
    analyzer_data = _as_dict(data.get("analyzers"))
    if analyzer_data:
        analyzers.enabled = _as_str_list(analyzer_data.get("enabled"))

    output_dir_str = _as_str(data.get("output_dir"))
    output_dir = root / output_dir_str if output_dir_str else None

    return OnboredConfig(
        root=root,
        llm=llm,
        limits=limits,
        analyzers=analyzers,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        output_dir=output_dir,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AnalyzerConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "LLMConfig",
    "OnboredConfig",
    "ScanLimits",
    "load_config",
]
