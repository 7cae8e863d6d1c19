# SPDX-License-Identifier: MIT
"""
pointregrid
===========

Regridding of point time series from one irregular set of geospatial
points (source) onto another (target), by nearest-neighbor assignment or
inverse-distance weighting.

Main high-level entry points
----------------------------

- :func:`regrid_points` – in-memory regrid of
  :class:`ObservationPoint` lists, returning interpolated points plus the
  NN / IDW mapping records.
- :class:`Regridder` – file pipeline: read source/target files, regrid,
  write ``regridded.txt`` and optional diagnostic mapping files.

Core submodules
---------------

- :mod:`pointregrid.spatial`       – haversine / euclidean distances, unit conversions
- :mod:`pointregrid.neighbors`     – :class:`SpatialMatcher` (NN and radius search)
- :mod:`pointregrid.interpolation` – :class:`Interpolator` (NN copy, IDW blend)
- :mod:`pointregrid.config`        – :class:`RegridConfig`
- :mod:`pointregrid.reporting`     – warning sinks and run-log setup
- :mod:`pointregrid.io`            – text / CSV / Parquet readers and writers
- :mod:`pointregrid.tables`        – pandas conversions
- :mod:`pointregrid.viz`           – plotting helpers for diagnostics
"""

from __future__ import annotations

from .config import RegridConfig
from .exceptions import (
    ConfigurationError,
    NoSourceMatchError,
    PointRegridError,
    ValidationError,
)
from .interpolation import Interpolator
from .io import InputReader, OutputWriter
from .neighbors import SpatialMatcher
from .records import (
    Coordinate,
    IDWMapping,
    NNMapping,
    NeighborCandidate,
    ObservationPoint,
)
from .regrid import RegridResult, Regridder, regrid_points
from .reporting import (
    CollectingReporter,
    LoggingReporter,
    NullReporter,
    setup_logging,
)
from .spatial import (
    degrees_to_km,
    distance,
    haversine_distance,
    km_to_degrees,
    normalize_longitude,
)
from .tables import (
    idw_mappings_to_frame,
    nn_mappings_to_frame,
    points_from_frame,
    points_to_frame,
)


__all__ = [
    # High-level
    "regrid_points",
    "Regridder",
    "RegridResult",
    # Engine
    "SpatialMatcher",
    "Interpolator",
    "RegridConfig",
    # Records
    "Coordinate",
    "ObservationPoint",
    "NeighborCandidate",
    "NNMapping",
    "IDWMapping",
    # Errors
    "PointRegridError",
    "ConfigurationError",
    "ValidationError",
    "NoSourceMatchError",
    # Reporting
    "NullReporter",
    "LoggingReporter",
    "CollectingReporter",
    "setup_logging",
    # Distances
    "distance",
    "haversine_distance",
    "km_to_degrees",
    "degrees_to_km",
    "normalize_longitude",
    # I/O and tables
    "InputReader",
    "OutputWriter",
    "points_from_frame",
    "points_to_frame",
    "nn_mappings_to_frame",
    "idw_mappings_to_frame",
]


# Sync this with pyproject.toml if you bump the version
__version__ = "0.1.0"
