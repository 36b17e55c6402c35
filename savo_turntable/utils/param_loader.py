#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/utils/param_loader.py
-------------------------------------------------
YAML parameter loading helpers for `savo_turntable`.

The ROS2 node gets its parameters from `--params-file`; the sim CLI and the
tests read the same file directly through this module so there is exactly
one source of tuning values.

Accepted file shapes
--------------------
# 1) ROS2 style (what launch files pass to the node)
turntable_control_node:
  ros__parameters:
    pid:
      kp: 0.05
    convergence_threshold_deg: 0.2

# 2) Flat mapping (quick tuning files)
pid.kp: 0.05
convergence_threshold_deg: 0.2

Nested mappings are flattened to dotted names (`pid.kp`).

Usage
-----
from savo_turntable.utils.param_loader import load_control_config

config, summary = load_control_config("config/turntable_control.yaml")
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from ..constants import (
    CONVERGENCE_THRESHOLD_DEG_DEFAULT,
    DT_EPSILON_S_DEFAULT,
    KD_DEFAULT,
    KI_DEFAULT,
    KP_DEFAULT,
    LEVER_MAX,
    LEVER_MIN,
    LEVER_NEUTRAL_DEFAULT,
    MAX_TASK_DURATION_S_DEFAULT,
    NEUTRAL_ON_CANCEL_DEFAULT,
    NODE_NAME_TURNTABLE_CONTROL,
    OUTPUT_MAX_DEFAULT,
    OUTPUT_MIN_DEFAULT,
    SEARCH_DISTANCE_DEFAULT,
    STATUS_PUBLISH_HZ_DEFAULT,
    TICK_HZ_DEFAULT,
)
from ..drivers.turntable_exceptions import TurntableConfigError, TurntableErrorContext
from ..models.control_config import PidGains, TurntableControlConfig
from .logging import LoggerAdapter, format_kv

ROS_PARAMS_KEY = "ros__parameters"

PathLike = Union[str, Path]


# =============================================================================
# Generic parsing helpers
# =============================================================================

def _clamp_num(value: float, lo: Optional[float], hi: Optional[float]) -> float:
    if lo is not None and value < lo:
        value = lo
    if hi is not None and value > hi:
        value = hi
    return value


def _to_bool(value: Any, default: bool = False) -> Tuple[bool, bool]:
    """Return (value, parse_fallback_used)."""
    if isinstance(value, bool):
        return value, False
    if value is None:
        return bool(default), True
    if isinstance(value, (int, float)):
        return bool(value), False
    text = str(value).strip().lower()
    if text in ("1", "true", "t", "yes", "y", "on"):
        return True, False
    if text in ("0", "false", "f", "no", "n", "off"):
        return False, False
    return bool(default), True


def _to_float(value: Any, default: float = 0.0) -> Tuple[float, bool]:
    """Return (value, parse_fallback_used). Non-finite values fall back too."""
    if value is None or isinstance(value, bool):
        return float(default), True
    try:
        x = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except (TypeError, ValueError):
        return float(default), True
    if not math.isfinite(x):
        return float(default), True
    return x, False


# =============================================================================
# Structured records
# =============================================================================

@dataclass
class ParamSpec:
    """Name, default and bounds of one recognised parameter."""
    name: str
    default: Any
    kind: str = "float"      # float | bool
    lo: Optional[float] = None
    hi: Optional[float] = None
    description: str = ""


@dataclass
class ParamRecord:
    """
    Final loaded value of one parameter plus how it got there.
    """
    name: str
    declared_default: Any
    loaded_value: Any
    kind: str
    from_file: bool = False
    clamped: bool = False
    parse_fallback_used: bool = False
    notes: str = ""


@dataclass
class ParamLoadSummary:
    """
    Aggregate summary of one load, for logs and tests.
    """
    component: str = "savo_turntable"
    source: str = "<defaults>"
    records: Dict[str, ParamRecord] = field(default_factory=dict)
    unknown_keys: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "source": self.source,
            "count": len(self.records),
            "params": {
                k: {
                    "declared_default": v.declared_default,
                    "loaded_value": v.loaded_value,
                    "kind": v.kind,
                    "from_file": v.from_file,
                    "clamped": v.clamped,
                    "parse_fallback_used": v.parse_fallback_used,
                    "notes": v.notes,
                }
                for k, v in self.records.items()
            },
            "unknown_keys": sorted(self.unknown_keys),
        }

    def values_dict(self) -> Dict[str, Any]:
        return {k: v.loaded_value for k, v in self.records.items()}

    def get(self, name: str, default: Any = None) -> Any:
        rec = self.records.get(name)
        return rec.loaded_value if rec is not None else default

    def log(self, logger: LoggerAdapter) -> None:
        logger.info(f"[{self.component}] params loaded from {self.source} | {format_kv(**self.values_dict())}")
        for rec in self.records.values():
            if rec.parse_fallback_used or rec.clamped:
                logger.warn(f"[{self.component}] param {rec.name}: {rec.notes}")
        if self.unknown_keys:
            logger.warn(f"[{self.component}] ignored unknown params: {', '.join(sorted(self.unknown_keys))}")


# =============================================================================
# Recognised parameters
# =============================================================================

CONTROL_PARAM_SPECS: Tuple[ParamSpec, ...] = (
    ParamSpec("pid.kp", KP_DEFAULT, description="proportional gain"),
    ParamSpec("pid.ki", KI_DEFAULT, description="integral gain"),
    ParamSpec("pid.kd", KD_DEFAULT, description="derivative gain"),
    ParamSpec("convergence_threshold_deg", CONVERGENCE_THRESHOLD_DEG_DEFAULT, lo=1e-6),
    ParamSpec("neutral_lever", LEVER_NEUTRAL_DEFAULT, lo=LEVER_MIN, hi=LEVER_MAX),
    ParamSpec("output_min", OUTPUT_MIN_DEFAULT),
    ParamSpec("output_max", OUTPUT_MAX_DEFAULT),
    ParamSpec("dt_epsilon_s", DT_EPSILON_S_DEFAULT, lo=0.0),
    ParamSpec("neutral_on_cancel", NEUTRAL_ON_CANCEL_DEFAULT, kind="bool"),
    ParamSpec("max_task_duration_s", MAX_TASK_DURATION_S_DEFAULT, lo=0.0),
)

NODE_PARAM_SPECS: Tuple[ParamSpec, ...] = (
    ParamSpec("tick_hz", TICK_HZ_DEFAULT, lo=1.0, hi=1000.0),
    ParamSpec("status_publish_hz", STATUS_PUBLISH_HZ_DEFAULT, lo=0.0, hi=100.0),
    ParamSpec("search_distance", SEARCH_DISTANCE_DEFAULT, lo=0.0),
)

# Keys the node reads itself (topic names etc.); not reported as unknown
_PASSTHROUGH_KEYS = frozenset({
    "turntable_name",
    "angle_stale_timeout_s",
    "angle_topic",
    "command_topic",
    "lever_topic",
    "status_topic",
    "subdivisions",
    "use_sim_time",
})


# =============================================================================
# File reading
# =============================================================================

def flatten_params(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys: {"pid": {"kp": 1}} -> {"pid.kp": 1}."""
    out: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            out.update(flatten_params(value, name))
        else:
            out[name] = value
    return out


def extract_node_params(data: Any, node_name: str = NODE_NAME_TURNTABLE_CONTROL) -> Dict[str, Any]:
    """
    Pick the parameter block for `node_name` out of a parsed YAML document.

    Lookup order: `<node_name>` / `/<node_name>` / `/**` wrappers with a
    `ros__parameters` block, then a single wrapper of any name, then the
    document itself as a flat mapping.
    """
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TurntableConfigError(
            "params file must contain a mapping",
            context=TurntableErrorContext(operation="load_params", value=type(data).__name__),
        )

    for key in (node_name, f"/{node_name}", "/**"):
        block = data.get(key)
        if isinstance(block, Mapping) and isinstance(block.get(ROS_PARAMS_KEY), Mapping):
            return flatten_params(block[ROS_PARAMS_KEY])

    wrapped = [v for v in data.values() if isinstance(v, Mapping) and isinstance(v.get(ROS_PARAMS_KEY), Mapping)]
    if len(wrapped) == 1:
        return flatten_params(wrapped[0][ROS_PARAMS_KEY])
    if len(wrapped) > 1:
        raise TurntableConfigError(
            f"params file has several node blocks and none named {node_name!r}",
            context=TurntableErrorContext(operation="load_params", value=sorted(str(k) for k in data)),
        )

    return flatten_params(data)


def read_params_file(path: PathLike, node_name: str = NODE_NAME_TURNTABLE_CONTROL) -> Dict[str, Any]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise TurntableConfigError(
            "cannot read params file",
            context=TurntableErrorContext(operation="load_params", value=str(p)),
            cause=e,
        ) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise TurntableConfigError(
            "params file is not valid YAML",
            context=TurntableErrorContext(operation="load_params", value=str(p)),
            cause=e,
        ) from e

    return extract_node_params(data, node_name)


# =============================================================================
# Typed loading
# =============================================================================

def _load_one(spec: ParamSpec, raw: Mapping[str, Any]) -> ParamRecord:
    rec = ParamRecord(
        name=spec.name,
        declared_default=spec.default,
        loaded_value=spec.default,
        kind=spec.kind,
        from_file=spec.name in raw,
    )
    if not rec.from_file:
        return rec

    value = raw[spec.name]
    if spec.kind == "bool":
        rec.loaded_value, rec.parse_fallback_used = _to_bool(value, spec.default)
    else:
        parsed, rec.parse_fallback_used = _to_float(value, spec.default)
        bounded = _clamp_num(parsed, spec.lo, spec.hi)
        rec.clamped = bounded != parsed
        rec.loaded_value = bounded

    if rec.parse_fallback_used:
        rec.notes = f"unparseable value {value!r}, using default {spec.default!r}"
    elif rec.clamped:
        rec.notes = f"value {value!r} clamped to {rec.loaded_value!r}"
    return rec


def load_params(
    source: Union[PathLike, Mapping[str, Any], None] = None,
    *,
    node_name: str = NODE_NAME_TURNTABLE_CONTROL,
    component: str = "savo_turntable",
) -> ParamLoadSummary:
    """
    Load every recognised parameter from a YAML path, an already-parsed
    mapping, or nothing (code defaults).
    """
    if source is None:
        raw: Dict[str, Any] = {}
        label = "<defaults>"
    elif isinstance(source, Mapping):
        raw = extract_node_params(source, node_name)
        label = "<mapping>"
    else:
        raw = read_params_file(source, node_name)
        label = str(source)

    summary = ParamLoadSummary(component=component, source=label)
    for spec in CONTROL_PARAM_SPECS + NODE_PARAM_SPECS:
        summary.records[spec.name] = _load_one(spec, raw)

    known = {s.name for s in CONTROL_PARAM_SPECS + NODE_PARAM_SPECS} | _PASSTHROUGH_KEYS
    summary.unknown_keys = {k: v for k, v in raw.items() if k not in known}
    return summary


def control_config_from_summary(summary: ParamLoadSummary) -> TurntableControlConfig:
    v = summary.values_dict()
    return TurntableControlConfig(
        gains=PidGains(kp=v["pid.kp"], ki=v["pid.ki"], kd=v["pid.kd"]),
        convergence_threshold_deg=v["convergence_threshold_deg"],
        neutral_lever=v["neutral_lever"],
        output_min=v["output_min"],
        output_max=v["output_max"],
        dt_epsilon_s=v["dt_epsilon_s"],
        neutral_on_cancel=v["neutral_on_cancel"],
        max_task_duration_s=v["max_task_duration_s"],
    )


def load_control_config(
    source: Union[PathLike, Mapping[str, Any], None] = None,
    *,
    node_name: str = NODE_NAME_TURNTABLE_CONTROL,
) -> Tuple[TurntableControlConfig, ParamLoadSummary]:
    """
    Build a validated `TurntableControlConfig`. Raises `TurntableConfigError`
    when the file is unreadable or the values are inconsistent
    (e.g. output_min >= output_max).
    """
    summary = load_params(source, node_name=node_name)
    return control_config_from_summary(summary), summary


__all__ = [
    "ROS_PARAMS_KEY",
    "ParamSpec",
    "ParamRecord",
    "ParamLoadSummary",
    "CONTROL_PARAM_SPECS",
    "NODE_PARAM_SPECS",
    "flatten_params",
    "extract_node_params",
    "read_params_file",
    "load_params",
    "control_config_from_summary",
    "load_control_config",
]
