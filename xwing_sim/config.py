from __future__ import annotations
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Iterable, Optional
import os

import yaml

from .simulators.match import DEFAULT_ROUND_CAP
from .simulators.trials import DEFAULT_TRIALS, DEFAULT_WORKERS

ENV_PREFIX = "XWING_SIM__"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def _load_one(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    # JSON is valid YAML, so one parser covers both
    try:
        d = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"{path}: not valid YAML/JSON: {exc}") from exc
    if d is None:
        return {}
    if not isinstance(d, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return d

def load_configs(paths: Iterable[str] | None) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {}
    for p in (paths or []):
        cfg = _deep_merge(cfg, _load_one(p))
    return cfg

def env_overrides(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    # Nested via double underscores: XWING_SIM__SIMULATION__TRIALS=5000
    out: Dict[str, Any] = {}
    for k, v in os.environ.items():
        if not k.startswith(prefix):
            continue
        parts = k[len(prefix):].split("__")
        cur = out
        for i, part in enumerate(parts):
            key = part.lower()
            if i == len(parts) - 1:
                cur[key] = _coerce(v)
            else:
                cur = cur.setdefault(key, {})
    return out

def _coerce(s: str) -> Any:
    t = s.strip().lower()
    if t in ("true", "false"):
        return t == "true"
    if t in ("none", "null"):
        return None
    try:
        if "." in t:
            return float(t)
        return int(t)
    except ValueError:
        return s

def apply_cli_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    # argparse leaves unset options as None; those must not clobber lower layers
    return _deep_merge(base, _drop_none(overrides or {}))

def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in d.items():
        if isinstance(v, dict):
            out[k] = _drop_none(v)
        elif v is not None:
            out[k] = v
    return out


@dataclass
class SimulationSettings:
    """Knobs for one batch of trials (the ``simulation`` config section)."""

    trials: int = DEFAULT_TRIALS
    seed: Optional[int] = None
    action: str = "focus"
    roster: str = "default"
    workers: int = DEFAULT_WORKERS
    use_processes: bool = False
    round_cap: int = DEFAULT_ROUND_CAP
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.trials < 0:
            raise ValueError(f"trials must be non-negative, got {self.trials}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.round_cap < 1:
            raise ValueError(f"round_cap must be at least 1, got {self.round_cap}")
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "SimulationSettings":
        section = cfg.get("simulation", {}) or {}
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in section.items() if k in known}
        try:
            for key in ("trials", "workers", "round_cap"):
                if key in kwargs:
                    kwargs[key] = int(kwargs[key])
            if kwargs.get("seed") is not None:
                kwargs["seed"] = int(kwargs["seed"])
            if "use_processes" in kwargs:
                kwargs["use_processes"] = bool(kwargs["use_processes"])
            for key in ("action", "roster"):
                if key in kwargs:
                    kwargs[key] = str(kwargs[key])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid simulation setting: {exc}") from exc
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(
    paths: Iterable[str] | None = None,
    cli: Dict[str, Any] | None = None,
    env_prefix: str = ENV_PREFIX,
) -> SimulationSettings:
    """Files, then environment, then CLI flags; later layers win."""
    cfg = load_configs(paths)
    cfg = _deep_merge(cfg, env_overrides(env_prefix))
    cfg = apply_cli_overrides(cfg, {"simulation": cli or {}})
    return SimulationSettings.from_config(cfg)

__all__ = [
    "ENV_PREFIX",
    "SimulationSettings",
    "load_configs",
    "load_settings",
    "env_overrides",
    "apply_cli_overrides",
    "_deep_merge",
]
