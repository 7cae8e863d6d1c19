# SPDX-License-Identifier: MIT
"""
pointregrid.tables
==================

pandas conversions for points and mapping records.

- :func:`validate_required_columns` – friendly error for missing columns.
- :func:`points_from_frame` – wide table (lon, lat, time step, values…)
  to a list of :class:`~pointregrid.records.ObservationPoint`.
- :func:`points_to_frame` – the inverse.
- :func:`nn_mappings_to_frame` / :func:`idw_mappings_to_frame` – tidy
  diagnostic tables, one row per (target, source) pair.

Default column names follow the whitespace text format read by
:mod:`pointregrid.io`: ``Lon``, ``Lat``, ``Year`` followed by the value
columns.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .exceptions import ValidationError
from .records import IDWMapping, NNMapping, ObservationPoint
from .spatial import check_coordinates, normalize_longitude

LON_COL = "Lon"
LAT_COL = "Lat"
TIME_COL = "Year"

NN_MAPPING_COLUMNS = [
    "target_lon",
    "target_lat",
    "source_lon",
    "source_lat",
    "distance_km",
    "target_index",
]
IDW_MAPPING_COLUMNS = NN_MAPPING_COLUMNS + ["rank", "is_fallback"]


def validate_required_columns(
    df: pd.DataFrame,
    required: Sequence[str],
    context: Optional[str] = None,
) -> None:
    """
    Raise a ValidationError if any required columns are missing.

    Parameters
    ----------
    df : DataFrame
        Input table.
    required : sequence of str
        Column names that must be present.
    context : str or None, default None
        Optional string to prepend to the error message (e.g., the
        calling function name).
    """
    missing = [c for c in required if c not in df.columns]
    if not missing:
        return

    prefix = f"[{context}] " if context else ""
    raise ValidationError(
        f"{prefix}missing required columns {missing}. "
        f"Available columns include: {list(df.columns)[:12]}..."
    )


def points_from_frame(
    df: pd.DataFrame,
    *,
    lon_col: str = LON_COL,
    lat_col: str = LAT_COL,
    time_col: str = TIME_COL,
    value_cols: Optional[Sequence[str]] = None,
    adjust_longitude: bool = False,
) -> List[ObservationPoint]:
    """
    Build observation points from a wide table.

    Parameters
    ----------
    df : DataFrame
        One row per (location, time step).
    lon_col, lat_col, time_col : str
        Coordinate and time-step columns.
    value_cols : sequence of str or None
        Value columns, in order. If None, every other column is used in
        table order.
    adjust_longitude : bool, default False
        Wrap longitudes into [-180, 180].

    Returns
    -------
    list of ObservationPoint
        In row order.

    Raises
    ------
    ValidationError
        On missing columns, out-of-range coordinates, or missing / non
        numeric values (NaN is not supported).
    """
    validate_required_columns(df, [lon_col, lat_col, time_col], context="points_from_frame")

    if value_cols is None:
        value_cols = [c for c in df.columns if c not in (lon_col, lat_col, time_col)]
    else:
        value_cols = list(value_cols)
        validate_required_columns(df, value_cols, context="points_from_frame")

    try:
        lons = pd.to_numeric(df[lon_col], errors="raise").to_numpy(dtype=float)
        lats = pd.to_numeric(df[lat_col], errors="raise").to_numpy(dtype=float)
        steps = pd.to_numeric(df[time_col], errors="raise").to_numpy()
        if value_cols:
            values = df[value_cols].apply(pd.to_numeric, errors="raise").to_numpy(dtype=float)
        else:
            values = np.empty((len(df), 0), dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"[points_from_frame] non-numeric data: {exc}") from exc

    if np.isnan(lons).any() or np.isnan(lats).any() or pd.isna(steps).any():
        raise ValidationError("[points_from_frame] missing coordinates or time steps")
    if values.size and np.isnan(values).any():
        raise ValidationError("[points_from_frame] missing values are not supported")
    check_coordinates(lons, lats)

    points: List[ObservationPoint] = []
    for lon, lat, step, row in zip(lons, lats, steps, values):
        if adjust_longitude:
            lon = normalize_longitude(lon)
        points.append(ObservationPoint.from_lonlat(lon, lat, int(step), row.tolist()))
    return points


def points_to_frame(
    points: Sequence[ObservationPoint],
    *,
    columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Wide table with one row per point.

    ``columns`` gives the full header (coordinate, time step, then value
    names), e.g. the header tokens of the source file. If None, the
    default ``Lon``/``Lat``/``Year`` names are used with ``v1..vN``.
    """
    n_values = len(points[0].values) if len(points) else 0
    if columns is None:
        columns = [LON_COL, LAT_COL, TIME_COL] + [f"v{i + 1}" for i in range(n_values)]
    columns = list(columns)
    if len(columns) < 3:
        raise ValidationError("points_to_frame needs at least three column names")

    lon_col, lat_col, time_col = columns[:3]
    value_cols = columns[3:]
    if len(points) and len(value_cols) != n_values:
        raise ValidationError(
            f"points_to_frame got {len(value_cols)} value column names "
            f"for {n_values} values per point"
        )

    data = {
        lon_col: [p.longitude for p in points],
        lat_col: [p.latitude for p in points],
        time_col: np.asarray([p.time_step for p in points], dtype="int64"),
    }
    for j, name in enumerate(value_cols):
        data[name] = [p.values[j] for p in points]
    return pd.DataFrame(data, columns=columns)


def nn_mappings_to_frame(mappings: Sequence[NNMapping]) -> pd.DataFrame:
    rows = [
        {
            "target_lon": m.target.longitude,
            "target_lat": m.target.latitude,
            "source_lon": m.source.longitude,
            "source_lat": m.source.latitude,
            "distance_km": m.distance_km,
            "target_index": m.target_index,
        }
        for m in mappings
    ]
    return pd.DataFrame(rows, columns=NN_MAPPING_COLUMNS)


def idw_mappings_to_frame(mappings: Sequence[IDWMapping]) -> pd.DataFrame:
    """
    One row per candidate; ``rank`` is the candidate's position (0 =
    closest) within its target.
    """
    rows = []
    for m in mappings:
        for rank, cand in enumerate(m.candidates):
            rows.append(
                {
                    "target_lon": m.target.longitude,
                    "target_lat": m.target.latitude,
                    "source_lon": cand.coordinate.longitude,
                    "source_lat": cand.coordinate.latitude,
                    "distance_km": cand.distance_km,
                    "target_index": m.target_index,
                    "rank": rank,
                    "is_fallback": m.is_fallback,
                }
            )
    return pd.DataFrame(rows, columns=IDW_MAPPING_COLUMNS)


__all__ = [
    "LON_COL",
    "LAT_COL",
    "TIME_COL",
    "NN_MAPPING_COLUMNS",
    "IDW_MAPPING_COLUMNS",
    "validate_required_columns",
    "points_from_frame",
    "points_to_frame",
    "nn_mappings_to_frame",
    "idw_mappings_to_frame",
]
