# SPDX-License-Identifier: MIT
"""
pointregrid.records
===================

Plain record types passed between the matcher, the interpolator and the
I/O layer.

- :class:`Coordinate` – (longitude, latitude) in degrees.
- :class:`ObservationPoint` – a coordinate, an integer time step (e.g. a
  year) and an ordered tuple of values (e.g. 12 monthly values).
- :class:`NeighborCandidate` – a source coordinate and its distance (km)
  to one target.
- :class:`NNMapping` – the single nearest source of a target.
- :class:`IDWMapping` – the ordered candidate list of a target, flagged
  when it was produced by the nearest-neighbor fallback.

All records are frozen dataclasses; a regrid run never mutates its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Tuple


@dataclass(frozen=True)
class Coordinate:
    longitude: float
    latitude: float

    def __iter__(self):
        yield self.longitude
        yield self.latitude


@dataclass(frozen=True)
class ObservationPoint:
    """
    One row of a dataset: where, when, and the value vector.

    ``values`` is normalized to a tuple of floats so that points can be
    hashed, compared and shared between threads safely.
    """

    coordinate: Coordinate
    time_step: int
    values: Tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "time_step", int(self.time_step))
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))

    @classmethod
    def from_lonlat(
        cls,
        longitude: float,
        latitude: float,
        time_step: int,
        values: Iterable[float] = (),
    ) -> "ObservationPoint":
        return cls(Coordinate(float(longitude), float(latitude)), time_step, tuple(values))

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    def with_values(self, values: Iterable[float]) -> "ObservationPoint":
        """Copy of this point carrying ``values``."""
        return replace(self, values=tuple(values))


@dataclass(frozen=True)
class NeighborCandidate:
    coordinate: Coordinate
    distance_km: float


@dataclass(frozen=True)
class NNMapping:
    target_index: int
    target: Coordinate
    source: Coordinate
    distance_km: float


@dataclass(frozen=True)
class IDWMapping:
    target_index: int
    target: Coordinate
    candidates: Tuple[NeighborCandidate, ...]
    is_fallback: bool = False


__all__ = [
    "Coordinate",
    "ObservationPoint",
    "NeighborCandidate",
    "NNMapping",
    "IDWMapping",
]
