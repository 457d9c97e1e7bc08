"""
Runtime configuration.

Builds a PipelineConfig from defaults, an optional YAML file and command
line overrides, and resolves the worker count against the host.
Configuration keys may be given in snake_case or in the camelCase spelling also
accepted on the command line (``powerStart``, ``powerEnd``).
"""

from __future__ import annotations

import dataclasses
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml

from multibrotgif.exceptions import ConfigError
from multibrotgif.types import (
    Bailout,
    Domain,
    Endpoint,
    ExecutorKind,
    PipelineConfig,
    SweepTarget,
)

_ENUM_FIELDS = {
    "sweep_target": SweepTarget,
    "endpoint": Endpoint,
    "bailout": Bailout,
    "executor": ExecutorKind,
}

_INT_FIELDS = ("dimension", "frames", "delay", "iterations", "loop_count", "workers")
_FLOAT_FIELDS = ("power_start", "power_end", "sweep_start", "sweep_end", "stall_timeout_s")

_RE_CAMEL = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _snake(key: str) -> str:
    return _RE_CAMEL.sub(r"_\1", key).lower().replace("-", "_")


def _number(name: str, value: Any, kind: type) -> Any:
    """Convert a YAML or command-line scalar to *kind*, or raise ConfigError."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number, got {value!r}.")
    try:
        number = kind(value)
    except (TypeError, ValueError):
        raise ConfigError(
            f"{name} must be {'an integer' if kind is int else 'a number'}, "
            f"got {value!r}."
        ) from None
    if kind is int and isinstance(value, float) and number != value:
        raise ConfigError(f"{name} must be an integer, got {value!r}.")
    return number


def _coerce(name: str, value: Any) -> Any:
    if name in _INT_FIELDS:
        return _number(name, value, int)
    if name in _FLOAT_FIELDS:
        return _number(name, value, float)
    if name == "palette" and not isinstance(value, str):
        raise ConfigError(f"palette must be a name, got {value!r}.")
    if name in _ENUM_FIELDS and not isinstance(value, _ENUM_FIELDS[name]):
        try:
            return _ENUM_FIELDS[name](value)
        except (TypeError, ValueError):
            choices = [m.value for m in _ENUM_FIELDS[name]]
            raise ConfigError(
                f"Invalid {name} {value!r}; choose from {choices}."
            ) from None
    if name == "domain" and not isinstance(value, Domain):
        if isinstance(value, Mapping):
            try:
                return Domain(**{_snake(str(k)): float(v) for k, v in value.items()})
            except (TypeError, ValueError):
                raise ConfigError(
                    "domain mapping takes numeric x_min, x_max, y_min, y_max; "
                    f"got {dict(value)!r}."
                ) from None
        try:
            x_min, x_max, y_min, y_max = (float(v) for v in value)
        except (TypeError, ValueError):
            raise ConfigError(
                f"domain must be [x_min, x_max, y_min, y_max], got {value!r}."
            ) from None
        return Domain(x_min, x_max, y_min, y_max)
    return value


def build_config(
    overrides: Mapping[str, Any] | None = None,
    base: PipelineConfig | None = None,
) -> PipelineConfig:
    """Apply *overrides* on top of *base* (or the defaults).

    ``None`` values are ignored so unset command-line flags do not clobber
    values coming from a config file.
    """
    config = base or PipelineConfig()
    known = {f.name for f in dataclasses.fields(PipelineConfig)}
    changes: dict[str, Any] = {}
    for key, value in (overrides or {}).items():
        name = _snake(key)
        if name not in known:
            raise ConfigError(f"Unknown configuration key {key!r}.")
        if value is None:
            continue
        changes[name] = _coerce(name, value)
    config = dataclasses.replace(config, **changes)
    validate_config(config)
    return config


def validate_config(config: PipelineConfig) -> None:
    """Reject values no run could use.

    The sweep direction is checked later by the scheduler so that it
    surfaces as InvalidParameterRange.
    """
    if config.dimension < 1:
        raise ConfigError(f"dimension must be >= 1, got {config.dimension}.")
    if config.iterations < 0:
        raise ConfigError(f"iterations must be >= 0, got {config.iterations}.")
    if config.delay < 0:
        raise ConfigError(f"delay must be >= 0, got {config.delay}.")
    if config.workers < 0:
        raise ConfigError(f"workers must be >= 0, got {config.workers}.")
    if config.stall_timeout_s is not None and config.stall_timeout_s <= 0:
        raise ConfigError("stall_timeout_s must be positive when set.")


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML mapping of configuration keys."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}.")
    return data


def resolve_worker_count(config: PipelineConfig) -> int:
    """Concurrency limit: the configured value, else every available CPU."""
    if config.workers > 0:
        return config.workers
    return os.cpu_count() or 1
