"""
Engine configuration.

Values come from (lowest to highest precedence): the dataclass defaults, a
YAML file, and ``RESERVOIR_*`` environment variables. Unknown keys are
rejected so a typo never silently falls back to a default.

Example ``reservoir.yaml``::

    default_fee_bps: 30
    max_exp_input: 25000.0
    max_question_len: 256
    log_level: INFO
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..errors import ConfigError

ENV_PREFIX = "RESERVOIR_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EngineConfig:
    default_fee_bps: int = 30
    max_exp_input: float = 25_000.0
    max_question_len: int = 256
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not isinstance(self.default_fee_bps, int) or isinstance(self.default_fee_bps, bool):
            raise ConfigError("default_fee_bps must be an int")
        if not (0 <= self.default_fee_bps <= 10_000):
            raise ConfigError(f"default_fee_bps must be in [0, 10000]: {self.default_fee_bps}")
        if (
            not isinstance(self.max_exp_input, (int, float))
            or isinstance(self.max_exp_input, bool)
            or not math.isfinite(self.max_exp_input)
            or self.max_exp_input <= 0
        ):
            raise ConfigError(f"max_exp_input must be positive and finite: {self.max_exp_input}")
        if not isinstance(self.max_question_len, int) or self.max_question_len <= 0:
            raise ConfigError(f"max_question_len must be a positive int: {self.max_question_len}")
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {_LOG_LEVELS}: {self.log_level}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _field_types() -> dict[str, type]:
    return {f.name: type(getattr(EngineConfig(), f.name)) for f in fields(EngineConfig)}


def _coerce(name: str, raw: Any) -> Any:
    typ = _field_types()[name]
    if typ is str:
        return str(raw).upper() if name == "log_level" else str(raw)
    if isinstance(raw, str):
        try:
            return typ(raw.strip())
        except ValueError as exc:
            raise ConfigError(f"{name}: cannot parse {raw!r} as {typ.__name__}") from exc
    if typ is float and isinstance(raw, int) and not isinstance(raw, bool):
        return float(raw)
    return raw


def config_from_mapping(values: Mapping[str, Any], base: Optional[EngineConfig] = None) -> EngineConfig:
    known = _field_types()
    unknown = sorted(set(values) - set(known))
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
    updates = {name: _coerce(name, raw) for name, raw in values.items()}
    return replace(base or EngineConfig(), **updates)


def load_config(path: Path, base: Optional[EngineConfig] = None) -> EngineConfig:
    """Load a YAML config file on top of `base` (defaults if omitted)."""
    raw = Path(path).read_text(encoding="utf-8")
    doc = yaml.safe_load(raw)
    if doc is None:
        return base or EngineConfig()
    if not isinstance(doc, dict):
        raise ConfigError(f"{path}: config must be a mapping")
    return config_from_mapping(doc, base)


def config_from_env(
    base: Optional[EngineConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EngineConfig:
    """Overlay ``RESERVOIR_<FIELD>`` environment variables, e.g. ``RESERVOIR_LOG_LEVEL=DEBUG``."""
    env = os.environ if environ is None else environ
    values = {}
    for name in _field_types():
        key = ENV_PREFIX + name.upper()
        if key in env:
            values[name] = env[key]
    return config_from_mapping(values, base)


def configure_logging(config: EngineConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "ENV_PREFIX",
    "EngineConfig",
    "config_from_mapping",
    "load_config",
    "config_from_env",
    "configure_logging",
]
