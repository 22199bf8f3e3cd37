"""Run configuration for motif construction."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

__all__ = [
    "FoldConfig",
    "MotifConfig",
    "load_config",
]


@dataclass
class FoldConfig:
    pseudoknot: bool = False           # False: ViennaRNA alifold, True: IPknot
    temperature: Optional[float] = None
    ipknot_exe: str = "ipknot"
    ipknot_args: Sequence[str] = ()
    timeout: Optional[float] = None    # seconds per backend call (IPknot only)


@dataclass
class MotifConfig:
    constrain: bool = False
    verbosity: int = 1                 # 0 quiet, 1 normal, 2 verbose, 3 very verbose
    max_length: int = 1000
    workers: Optional[int] = None      # None: one per CPU
    structure_key: str = "SS_cons"
    header_keys: Sequence[str] = ("AC", "ID")
    canonical_only: bool = True
    fold: FoldConfig = field(default_factory=FoldConfig)


def _build(cls, raw: dict[str, Any], where: str):
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown {where} option(s): {', '.join(sorted(unknown))}")
    return cls(**raw)


def load_config(path: Path) -> MotifConfig:
    """
    Load a config from YAML (``.yaml``/``.yml``) or JSON.

    Layout::

        constrain: true
        max_length: 1000
        workers: 4
        fold:
          pseudoknot: false
          temperature: 37.0
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text()
    if path.suffix in {".yaml", ".yml"}:
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
    else:
        raw = json.loads(text)

    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {path}")

    raw = dict(raw)
    fold = _build(FoldConfig, raw.pop("fold", None) or {}, "fold")
    if "header_keys" in raw:
        raw["header_keys"] = tuple(raw["header_keys"])
    cfg = _build(MotifConfig, raw, "config")
    cfg.fold = fold

    if cfg.max_length < 0:
        raise ValueError(f"max_length must be >= 0, got {cfg.max_length}")
    if cfg.workers is not None and cfg.workers < 1:
        raise ValueError(f"workers must be >= 1, got {cfg.workers}")

    return cfg
