from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

DEFAULT_ORDER_STEP = 1024.0
DEFAULT_SPRINT_LENGTH_DAYS = 14
DEFAULT_SPRINT_NAME_TEMPLATE = 'Sprint {n}'


class ConfigError(RuntimeError):
    pass


@dataclass
class TrackerConfig:
    version: int
    source_file: Path | None
    # Ordering configuration
    order_step: float
    order_baseline: float
    # Sprint defaults
    sprint_length_days: int
    sprint_name_template: str
    # Logging configuration
    logging_json_enabled: bool
    logging_level: str


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], value)  # Fallback to original if not found
    return value


def _build(raw: dict[str, Any], source: Path | None) -> TrackerConfig:
    ordering = cast(dict[str, Any], raw.get('ordering', {}) or {})
    sprints = cast(dict[str, Any], raw.get('sprints', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})

    try:
        step = float(ordering.get('step', DEFAULT_ORDER_STEP))
        baseline = float(ordering.get('baseline', 0.0))
        length_days = int(sprints.get('length_days', DEFAULT_SPRINT_LENGTH_DAYS))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f'Invalid numeric configuration value: {exc}') from exc
    if not (math.isfinite(step) and math.isfinite(baseline)):
        raise ConfigError(f'ordering.step and ordering.baseline must be finite (got {step}, {baseline})')
    if step <= 0:
        raise ConfigError(f'ordering.step must be positive (got {step})')
    if length_days < 0:
        raise ConfigError(f'sprints.length_days must not be negative (got {length_days})')

    return TrackerConfig(
        version=int(raw.get('version', 1)),
        source_file=source,
        order_step=step,
        order_baseline=baseline,
        sprint_length_days=length_days,
        sprint_name_template=str(sprints.get('name_template', DEFAULT_SPRINT_NAME_TEMPLATE)),
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(_resolve_env_var(logging_config.get('level', 'INFO'))),
    )


def default_config() -> TrackerConfig:
    return _build({}, None)


def load_config(path: str | Path) -> TrackerConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        loaded = yaml.safe_load(p.read_text(encoding='utf-8')) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f'Configuration root must be a mapping: {p}')
    return _build(cast(dict[str, Any], loaded), p)


__all__ = ['ConfigError', 'TrackerConfig', 'default_config', 'load_config']
