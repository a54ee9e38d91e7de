"""Tolerance configuration for the numeric checker."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class ToleranceConfig:
    coincidence: float = 1e-12  # two points define no line below this distance
    line: float = 1e-6  # point identity and canonical line-key grid
    on_entity: float = 0.5  # construction points are snapped to a coarse grid
    length: float = 0.01
    angle_deg: float = 5.0


_TOLERANCE_CONFIG = ToleranceConfig()


def get_tolerance_config() -> ToleranceConfig:
    return copy.deepcopy(_TOLERANCE_CONFIG)


def set_tolerance_config(config: ToleranceConfig) -> None:
    global _TOLERANCE_CONFIG
    _TOLERANCE_CONFIG = copy.deepcopy(config)


def active_tolerances() -> ToleranceConfig:
    """Return the live configuration without copying; callers must not mutate it."""

    return _TOLERANCE_CONFIG
