# SPDX-License-Identifier: MIT
"""
pointregrid.neighbors
=====================

Spatial matching of target points against a source point set.

:class:`SpatialMatcher` answers, for each target:

- :meth:`SpatialMatcher.nearest_neighbor`:
    the single closest source point (:class:`~pointregrid.records.NNMapping`);
- :meth:`SpatialMatcher.radius_neighbors`:
    the source points within ``config.radius``, closest first and at most
    ``config.max_points`` of them, or the nearest neighbor alone when fewer
    than ``config.min_points`` fall inside the radius
    (:class:`~pointregrid.records.IDWMapping`).

Every search is an exhaustive scan over the full source list, one target
row at a time. Ordering guarantees:

- nearest-neighbor ties go to the first source in list order
  (``numpy.argmin`` returns the first minimum);
- radius candidates with equal distances keep source-list order
  (stable sort), and truncation to ``max_points`` happens after sorting.

Distances are reported in kilometers for both metrics; euclidean degree
distances are converted with :func:`~pointregrid.spatial.degrees_to_km` at
the target latitude.
"""

from __future__ import annotations

import copy
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import RegridConfig
from .exceptions import NoSourceMatchError
from .records import Coordinate, IDWMapping, NNMapping, NeighborCandidate, ObservationPoint
from .reporting import Reporter, ensure_reporter
from .spatial import (
    HAVERSINE,
    check_coordinates,
    degrees_to_km,
    distances_to,
    km_to_degrees,
)

PointLike = Union[ObservationPoint, Coordinate]


def _as_coordinate(point: PointLike) -> Coordinate:
    return point.coordinate if isinstance(point, ObservationPoint) else point


class SpatialMatcher:
    """
    Nearest-neighbor and radius search over a fixed source list.

    Parameters
    ----------
    source_points : sequence of ObservationPoint
        Source dataset. The matcher keeps a reference to it for the
        lifetime of one regrid call and never modifies it.
    config : RegridConfig
        Metric, radius and neighbor-count limits.
    reporter : Reporter or None
        Receives warnings (distance beyond radius, fallback triggered).

    Raises
    ------
    NoSourceMatchError
        If ``source_points`` is empty.
    ValidationError
        If a source coordinate is out of range.
    """

    def __init__(
        self,
        source_points: Sequence[ObservationPoint],
        config: RegridConfig,
        reporter: Optional[Reporter] = None,
    ):
        if len(source_points) == 0:
            raise NoSourceMatchError("Source point list is empty")

        self.source_points = source_points
        self.config = config
        self.reporter = ensure_reporter(reporter)

        n = len(source_points)
        self._lons = np.fromiter((p.longitude for p in source_points), dtype=float, count=n)
        self._lats = np.fromiter((p.latitude for p in source_points), dtype=float, count=n)
        check_coordinates(self._lons, self._lats)

    def with_reporter(self, reporter: Optional[Reporter]) -> "SpatialMatcher":
        """Shallow copy sharing the source arrays, reporting to ``reporter``."""
        clone = copy.copy(self)
        clone.reporter = ensure_reporter(reporter)
        return clone

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @property
    def _is_haversine(self) -> bool:
        return self.config.distance_metric == HAVERSINE

    def _distance_row(self, target: Coordinate) -> np.ndarray:
        return distances_to(
            target,
            self._lons,
            self._lats,
            self.config.distance_metric,
            check_sources=False,
        )

    def _to_km(self, dist, latitude: float):
        return dist if self._is_haversine else degrees_to_km(dist, latitude)

    def _closest(self, target: Coordinate, row: np.ndarray) -> Tuple[int, float]:
        """Index of the first minimum finite distance and that distance in km."""
        finite = np.isfinite(row)
        if not finite.any():
            raise NoSourceMatchError(
                f"No valid source points found for target "
                f"({target.longitude}, {target.latitude})"
            )
        masked = np.where(finite, row, np.inf)
        idx = int(np.argmin(masked))
        return idx, float(self._to_km(float(masked[idx]), target.latitude))

    # ------------------------------------------------------------------ #
    # Single-target searches
    # ------------------------------------------------------------------ #

    def nearest_neighbor(self, target: PointLike, target_index: int = 0) -> NNMapping:
        """
        Closest source point to ``target``.

        Raises
        ------
        NoSourceMatchError
            If no finite distance could be computed.
        """
        coord = _as_coordinate(target)
        idx, dist_km = self._closest(coord, self._distance_row(coord))

        if dist_km > self.config.radius:
            self.reporter.warn(
                f"Nearest source point for target ({coord.longitude}, {coord.latitude}) "
                f"is at distance {dist_km} km, exceeding radius {self.config.radius} km"
            )

        return NNMapping(
            target_index=int(target_index),
            target=coord,
            source=self.source_points[idx].coordinate,
            distance_km=dist_km,
        )

    def radius_neighbors(self, target: PointLike, target_index: int = 0) -> IDWMapping:
        """
        Source points within the search radius of ``target``.

        Candidates inside the radius are sorted by distance (stable) and
        truncated to ``max_points``. With fewer than ``min_points`` inside
        the radius, the nearest neighbor is returned alone and the mapping
        is flagged ``is_fallback``.
        """
        coord = _as_coordinate(target)
        cfg = self.config
        row = self._distance_row(coord)

        if self._is_haversine:
            limit = cfg.radius
        else:
            limit = km_to_degrees(cfg.radius, coord.latitude)

        with np.errstate(invalid="ignore"):
            inside = np.flatnonzero(row <= limit)

        if inside.size < cfg.min_points:
            self.reporter.warn(
                f"Only {inside.size} points found within radius {cfg.radius} km "
                f"for target ({coord.longitude}, {coord.latitude}); falling back "
                f"to Nearest Neighbor (min_points = {cfg.min_points})"
            )
            idx, dist_km = self._closest(coord, row)
            candidates: Tuple[NeighborCandidate, ...] = (
                NeighborCandidate(self.source_points[idx].coordinate, dist_km),
            )
            is_fallback = True
        else:
            order = np.argsort(row[inside], kind="stable")[: cfg.max_points]
            chosen = inside[order]
            dist_km = np.atleast_1d(self._to_km(row[chosen], coord.latitude))
            candidates = tuple(
                NeighborCandidate(self.source_points[i].coordinate, float(d))
                for i, d in zip(chosen.tolist(), dist_km.tolist())
            )
            is_fallback = False

        if not candidates:
            raise NoSourceMatchError(
                f"No valid source points found for target "
                f"({coord.longitude}, {coord.latitude})"
            )

        return IDWMapping(
            target_index=int(target_index),
            target=coord,
            candidates=candidates,
            is_fallback=is_fallback,
        )

    # ------------------------------------------------------------------ #
    # Batch searches
    # ------------------------------------------------------------------ #

    def find_nearest_neighbors(
        self,
        targets: Sequence[PointLike],
        start_index: int = 0,
    ) -> List[NNMapping]:
        """
        :meth:`nearest_neighbor` for every target, in order.

        ``start_index`` offsets the recorded ``target_index`` when
        ``targets`` is a slice of a larger list.
        """
        return [
            self.nearest_neighbor(t, start_index + i) for i, t in enumerate(targets)
        ]

    def find_idw_neighbors(
        self,
        targets: Sequence[PointLike],
        start_index: int = 0,
    ) -> List[IDWMapping]:
        """:meth:`radius_neighbors` for every target, in order."""
        return [
            self.radius_neighbors(t, start_index + i) for i, t in enumerate(targets)
        ]


__all__ = ["SpatialMatcher"]
