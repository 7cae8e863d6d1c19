# SPDX-License-Identifier: MIT
"""
pointregrid.interpolation
=========================

Resolution of mapping records into output value vectors.

Given the mappings produced by :class:`~pointregrid.neighbors.SpatialMatcher`,
:class:`Interpolator` looks up the source rows that share the target's
time step and builds one output :class:`~pointregrid.records.ObservationPoint`
per resolvable target:

- nearest neighbor: the source value vector is copied verbatim;
- inverse distance weighting: ``sum(w_i * v_i) / sum(w_i)`` with
  ``w_i = 1 / d_i ** power`` (``d_i`` in km). Co-located candidates
  (``d_i <= 1e-6``) get a fixed weight of ``1e6``.

A target whose source rows cannot be found for its time step is skipped
with a warning. Only a run where *every* target is skipped is an error.

Output points keep the target's coordinate and time step, and the output
order follows the mapping order.
"""

from __future__ import annotations

import copy
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import IDW, NEAREST, RegridConfig
from .exceptions import NoSourceMatchError, ValidationError
from .records import Coordinate, IDWMapping, NNMapping, ObservationPoint
from .reporting import Reporter, ensure_reporter

COORD_EPS = 1e-6
DISTANCE_EPS = 1e-6
COLOCATED_WEIGHT = 1e6


def check_value_lengths(points: Sequence[ObservationPoint], what: str = "source") -> int:
    """
    Ensure every point carries the same number of values.

    Returns
    -------
    int
        The shared value-vector length (0 for an empty list).
    """
    if len(points) == 0:
        return 0
    size = len(points[0].values)
    for p in points:
        if len(p.values) != size:
            raise ValidationError(f"Inconsistent value sizes in {what} points")
    return size


def idw_weight(distance_km: float, power: float) -> float:
    """Inverse-distance weight, with a fixed large weight for co-located points."""
    if distance_km > DISTANCE_EPS:
        return 1.0 / distance_km ** power
    return COLOCATED_WEIGHT


class Interpolator:
    """
    Turn NN / IDW mappings into interpolated points.

    Parameters
    ----------
    source_points : sequence of ObservationPoint
        Source dataset, read-only for the duration of the call.
    config : RegridConfig
        Provides ``method`` and ``power``.
    reporter : Reporter or None
        Receives one warning per unresolved source or skipped target.

    Raises
    ------
    NoSourceMatchError
        If ``source_points`` is empty.
    ValidationError
        If source value vectors differ in length.
    """

    def __init__(
        self,
        source_points: Sequence[ObservationPoint],
        config: RegridConfig,
        reporter: Optional[Reporter] = None,
    ):
        if len(source_points) == 0:
            raise NoSourceMatchError("Source point list is empty")
        self.value_size = check_value_lengths(source_points, "source")

        self.source_points = source_points
        self.config = config
        self.reporter = ensure_reporter(reporter)

        # time step -> (positions, lons, lats), positions in source-list order
        grouped: Dict[int, List[int]] = {}
        for i, p in enumerate(source_points):
            grouped.setdefault(p.time_step, []).append(i)
        self._by_time: Dict[int, Tuple[np.ndarray, np.ndarray, np.ndarray]] = {}
        for step, positions in grouped.items():
            pos = np.asarray(positions, dtype=np.intp)
            self._by_time[step] = (
                pos,
                np.array([source_points[i].longitude for i in positions], dtype=float),
                np.array([source_points[i].latitude for i in positions], dtype=float),
            )

    def with_reporter(self, reporter: Optional[Reporter]) -> "Interpolator":
        """Shallow copy sharing the source lookup, reporting to ``reporter``."""
        clone = copy.copy(self)
        clone.reporter = ensure_reporter(reporter)
        return clone

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def find_source(self, coordinate: Coordinate, time_step: int) -> Optional[ObservationPoint]:
        """
        First source point at ``coordinate`` (within 1e-6°) for ``time_step``.
        """
        entry = self._by_time.get(int(time_step))
        if entry is None:
            return None
        pos, lons, lats = entry
        hit = np.flatnonzero(
            (np.abs(lons - coordinate.longitude) < COORD_EPS)
            & (np.abs(lats - coordinate.latitude) < COORD_EPS)
        )
        if hit.size == 0:
            return None
        return self.source_points[int(pos[hit[0]])]

    def _copy_from(self, target: ObservationPoint, source: Coordinate) -> Optional[ObservationPoint]:
        found = self.find_source(source, target.time_step)
        if found is None:
            self.reporter.warn(
                f"No source point found for target ({target.longitude}, "
                f"{target.latitude}, {target.time_step}) at source "
                f"({source.longitude}, {source.latitude})"
            )
            return None
        return target.with_values(found.values)

    # ------------------------------------------------------------------ #
    # Per-target resolution
    # ------------------------------------------------------------------ #

    def resolve_nearest(self, target: ObservationPoint, mapping: NNMapping) -> Optional[ObservationPoint]:
        """Copy the mapped source's values onto ``target``; None if unresolved."""
        return self._copy_from(target, mapping.source)

    def resolve_idw(self, target: ObservationPoint, mapping: IDWMapping) -> Optional[ObservationPoint]:
        """
        Blend the mapped candidates' values onto ``target``; None if none of
        them can be found for the target's time step.
        """
        if mapping.is_fallback:
            if len(mapping.candidates) != 1:
                raise ValidationError("Invalid fallback mapping: expected one source point")
            return self._copy_from(target, mapping.candidates[0].coordinate)

        weights: List[float] = []
        rows: List[Tuple[float, ...]] = []
        for cand in mapping.candidates:
            found = self.find_source(cand.coordinate, target.time_step)
            if found is None:
                self.reporter.warn(
                    f"No source point found for ({cand.coordinate.longitude}, "
                    f"{cand.coordinate.latitude}, {target.time_step}) in IDW interpolation"
                )
                continue
            weights.append(idw_weight(cand.distance_km, self.config.power))
            rows.append(found.values)

        if not rows:
            self.reporter.warn(
                f"No valid source points for target ({target.longitude}, "
                f"{target.latitude}, {target.time_step}) in IDW interpolation"
            )
            return None

        w = np.asarray(weights, dtype=float)
        v = np.asarray(rows, dtype=float)
        blended = (w[:, None] * v).sum(axis=0) / w.sum()
        return target.with_values(blended.tolist())

    # ------------------------------------------------------------------ #
    # Whole-list resolution
    # ------------------------------------------------------------------ #

    @staticmethod
    def _target_for(targets: Sequence[ObservationPoint], index: int, kind: str) -> ObservationPoint:
        if not 0 <= index < len(targets):
            raise ValidationError(f"Invalid target index in {kind} mapping")
        return targets[index]

    def resolve_nearest_all(
        self,
        targets: Sequence[ObservationPoint],
        mappings: Sequence[NNMapping],
        offset: int = 0,
    ) -> List[ObservationPoint]:
        """
        Resolve every NN mapping in order, dropping unresolved targets.

        ``offset`` is subtracted from ``target_index`` when ``targets`` is a
        slice of the full target list.
        """
        out: List[ObservationPoint] = []
        for m in mappings:
            target = self._target_for(targets, m.target_index - offset, "NN")
            point = self.resolve_nearest(target, m)
            if point is not None:
                out.append(point)
        return out

    def resolve_idw_all(
        self,
        targets: Sequence[ObservationPoint],
        mappings: Sequence[IDWMapping],
        offset: int = 0,
    ) -> List[ObservationPoint]:
        """Resolve every IDW mapping in order, dropping unresolved targets."""
        out: List[ObservationPoint] = []
        for m in mappings:
            target = self._target_for(targets, m.target_index - offset, "IDW")
            point = self.resolve_idw(target, m)
            if point is not None:
                out.append(point)
        return out

    def interpolate_nearest(
        self,
        targets: Sequence[ObservationPoint],
        mappings: Sequence[NNMapping],
    ) -> List[ObservationPoint]:
        result = self.resolve_nearest_all(targets, mappings)
        if not result:
            raise NoSourceMatchError("No points interpolated in NN mode")
        return result

    def interpolate_idw(
        self,
        targets: Sequence[ObservationPoint],
        mappings: Sequence[IDWMapping],
    ) -> List[ObservationPoint]:
        result = self.resolve_idw_all(targets, mappings)
        if not result:
            raise NoSourceMatchError("No points interpolated in IDW mode")
        return result

    def interpolate(
        self,
        targets: Sequence[ObservationPoint],
        nn_mappings: Sequence[NNMapping] = (),
        idw_mappings: Sequence[IDWMapping] = (),
    ) -> List[ObservationPoint]:
        """Dispatch on ``config.method``."""
        if self.config.method == NEAREST:
            return self.interpolate_nearest(targets, nn_mappings)
        if self.config.method == IDW:
            return self.interpolate_idw(targets, idw_mappings)
        raise ValidationError(f"Unknown interpolation method '{self.config.method}'")


__all__ = [
    "COORD_EPS",
    "DISTANCE_EPS",
    "COLOCATED_WEIGHT",
    "check_value_lengths",
    "idw_weight",
    "Interpolator",
]
