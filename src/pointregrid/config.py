# SPDX-License-Identifier: MIT
"""
pointregrid.config
==================

Immutable parameter bundle shared by the matcher, the interpolator and the
file pipeline.

Example
-------
>>> from pointregrid.config import RegridConfig
>>> cfg = RegridConfig(method="idw", radius=100.0, power=2.0,
...                    min_points=2, max_points=4)
>>> cfg.with_options(distance_metric="euclidean").distance_metric
'euclidean'
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .exceptions import ConfigurationError
from .spatial import HAVERSINE, SUPPORTED_METRICS

IDW = "idw"
NEAREST = "nearest"
SUPPORTED_METHODS: Tuple[str, ...] = (IDW, NEAREST)

GRID_BY_TIME = "grid_by_time"  # one row per cell and year, 12 monthly values
YEAR_BY_YEAR = "year_by_year"  # one row per cell, any number of values
SUPPORTED_LAYOUTS: Tuple[str, ...] = (GRID_BY_TIME, YEAR_BY_YEAR)


def _choice(name: str, value: Any, allowed: Tuple[str, ...]) -> str:
    key = str(value).lower()
    if key not in allowed:
        raise ConfigurationError(
            f"Unsupported {name} '{value}'. Supported values are: {list(allowed)}."
        )
    return key


@dataclass(frozen=True)
class RegridConfig:
    # method & metric
    method: str = IDW
    distance_metric: str = HAVERSINE
    data_layout: str = GRID_BY_TIME

    # IDW search
    radius: float = 100.0  # km; converted to degrees for euclidean
    power: float = 2.0
    max_points: int = 5
    min_points: Optional[int] = None  # None -> max_points

    # input / output
    adjust_longitude: bool = True
    precision: int = 5
    verbose: bool = False
    write_mappings: bool = False
    nn_mappings_file: str = "nn_mappings.txt"
    idw_mappings_file: str = "idw_mappings.txt"
    output_path: str = "./"

    # execution
    chunk_size: int = 1000
    n_jobs: int = 1

    def __post_init__(self):
        # frozen: normalised values are written through object.__setattr__
        def set_(name, value):
            object.__setattr__(self, name, value)

        set_("method", _choice("interpolation method", self.method, SUPPORTED_METHODS))
        set_(
            "distance_metric",
            _choice("distance metric", self.distance_metric, SUPPORTED_METRICS),
        )
        set_("data_layout", _choice("data layout", self.data_layout, SUPPORTED_LAYOUTS))

        if float(self.radius) < 0.0:
            raise ConfigurationError("Radius must be non-negative")
        if float(self.power) <= 0.0:
            raise ConfigurationError("Power must be positive")
        set_("radius", float(self.radius))
        set_("power", float(self.power))

        if int(self.max_points) <= 0:
            raise ConfigurationError("Max points must be positive")
        set_("max_points", int(self.max_points))

        min_points = self.max_points if self.min_points is None else int(self.min_points)
        if min_points <= 0:
            raise ConfigurationError("Min points must be positive")
        if min_points > self.max_points:
            raise ConfigurationError("Min points cannot exceed max points")
        set_("min_points", min_points)

        if int(self.precision) < 0:
            raise ConfigurationError("Precision must be non-negative")
        set_("precision", int(self.precision))

        if not self.nn_mappings_file:
            raise ConfigurationError("Nearest Neighbor mappings filename cannot be empty")
        if not self.idw_mappings_file:
            raise ConfigurationError("IDW mappings filename cannot be empty")

        if int(self.chunk_size) <= 0:
            raise ConfigurationError("Chunk size must be positive")
        set_("chunk_size", int(self.chunk_size))
        if int(self.n_jobs) == 0:
            raise ConfigurationError("n_jobs must be a non-zero integer (-1 = all cores)")
        set_("n_jobs", int(self.n_jobs))

    # ------------------------------------------------------------------ #
    # Construction helpers
    # ------------------------------------------------------------------ #

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "RegridConfig":
        """
        Build a config from a plain mapping (e.g. parsed JSON/YAML or CLI
        arguments). Unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys {unknown}. Valid keys are: {sorted(known)}."
            )
        return cls(**dict(options))

    def with_options(self, **changes: Any) -> "RegridConfig":
        """Validated copy with ``changes`` applied."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def is_idw(self) -> bool:
        return self.method == IDW


__all__ = [
    "IDW",
    "NEAREST",
    "SUPPORTED_METHODS",
    "GRID_BY_TIME",
    "YEAR_BY_YEAR",
    "SUPPORTED_LAYOUTS",
    "RegridConfig",
]
