"""Configuration for Values containers (dataclass + env vars + YAML)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import numpy as np
import yaml

logger = logging.getLogger("manifold_values.config")

ENV_PREFIX = "MANIFOLD_VALUES_"
_KEY_FORMATS = {"symbol", "int"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ValuesConfig:
    tolerance: float = 1e-9          # default tol for equals()
    dtype: str = "float64"           # dtype of stored numeric arrays
    log_level: str = "WARNING"
    key_format: str = "symbol"       # 'symbol' prints x3, 'int' prints raw ints

    def __post_init__(self):
        if not self.tolerance >= 0.0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance!r}")
        try:
            kind = np.dtype(self.dtype).kind
        except TypeError:
            raise ValueError(f"Unknown dtype {self.dtype!r}") from None
        if kind not in "fc":
            raise ValueError(f"dtype must be a floating or complex dtype, got {self.dtype!r}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unsupported log level {self.log_level!r}")
        if self.key_format not in _KEY_FORMATS:
            raise ValueError(f"Unsupported key format {self.key_format!r}")

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ValuesConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config fields: {sorted(unknown)}")
        kwargs = dict(data)
        if "tolerance" in kwargs:
            kwargs["tolerance"] = float(kwargs["tolerance"])
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None,
                 base: Optional["ValuesConfig"] = None) -> "ValuesConfig":
        """Overlay ``MANIFOLD_VALUES_*`` variables on ``base`` (defaults if omitted)."""
        env = os.environ if environ is None else environ
        cfg = base or cls()
        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            try:
                overrides[f.name] = float(raw) if f.name == "tolerance" else raw
            except ValueError:
                raise ValueError(f"Invalid {ENV_PREFIX}{f.name.upper()}={raw!r}") from None
        return replace(cfg, **overrides) if overrides else cfg


def load_config(path: str, apply_env: bool = False) -> ValuesConfig:
    """Read a YAML mapping of ``ValuesConfig`` fields.

    An empty file yields the defaults. ``apply_env`` lets environment
    variables override what the file says.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must hold a mapping, got {type(data).__name__}")
    cfg = ValuesConfig.from_mapping(data)
    logger.debug("Loaded config from %s: %s", path, cfg)
    if apply_env:
        cfg = ValuesConfig.from_env(base=cfg)
    return cfg


def configure_logging(level: Optional[str] = None, config: Optional[ValuesConfig] = None) -> None:
    """basicConfig with the format used by the command-line tools."""
    lvl = (level or (config.log_level if config else ValuesConfig().log_level)).upper()
    logging.basicConfig(level=lvl, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
