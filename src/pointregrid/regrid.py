# SPDX-License-Identifier: MIT
"""
pointregrid.regrid
==================

End-to-end regridding: read → match → interpolate → write.

- :func:`regrid_points` works on in-memory point lists and returns a
  :class:`RegridResult`.
- :class:`Regridder` runs the whole file pipeline: reads the source and
  target files, checks their headers, writes grid lists, regrids, and
  writes ``regridded.txt`` plus optional mapping files.

Targets are processed in chunks of ``config.chunk_size``. With
``config.n_jobs != 1`` the chunks run on a joblib thread pool; every chunk
only reads the shared source list and config, and results are gathered
back in target order. Warnings raised inside a parallel chunk are collected
per chunk and forwarded to the caller's reporter in chunk order once all
chunks are done.

Example
-------
>>> from pointregrid import ObservationPoint, RegridConfig, regrid_points
>>> src = [ObservationPoint.from_lonlat(87.25, 46.25, 2020, [1.0]),
...        ObservationPoint.from_lonlat(86.25, 46.25, 2020, [3.0])]
>>> tgt = [ObservationPoint.from_lonlat(88.0, 46.0, 2020)]
>>> cfg = RegridConfig(method="nearest", radius=100.0, min_points=2, max_points=4)
>>> regrid_points(src, tgt, cfg).points[0].values
(1.0,)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd
from joblib import Parallel, delayed
from tqdm.auto import tqdm

from .config import GRID_BY_TIME, IDW, NEAREST, RegridConfig
from .exceptions import NoSourceMatchError, ValidationError
from .interpolation import Interpolator
from .io import MONTHS_PER_ROW, InputReader, OutputWriter
from .neighbors import SpatialMatcher
from .records import IDWMapping, NNMapping, ObservationPoint
from .reporting import CollectingReporter, Reporter, ensure_reporter
from .tables import idw_mappings_to_frame, nn_mappings_to_frame, points_to_frame

REGRIDDED_FILE = "regridded.txt"
SOURCE_GRIDLIST_FILE = "source_gridlist.txt"
TARGET_GRIDLIST_FILE = "target_gridlist.txt"


@dataclass
class RegridResult:
    points: List[ObservationPoint]
    nn_mappings: List[NNMapping] = field(default_factory=list)
    idw_mappings: List[IDWMapping] = field(default_factory=list)

    def to_frame(self, headers: Optional[Sequence[str]] = None) -> pd.DataFrame:
        return points_to_frame(self.points, columns=headers)

    def nn_frame(self) -> pd.DataFrame:
        return nn_mappings_to_frame(self.nn_mappings)

    def idw_frame(self) -> pd.DataFrame:
        return idw_mappings_to_frame(self.idw_mappings)


@dataclass
class _ChunkResult:
    points: List[ObservationPoint]
    nn_mappings: List[NNMapping]
    idw_mappings: List[IDWMapping]
    messages: Optional[CollectingReporter] = None


def _spans(n: int, size: int) -> List[Tuple[int, int]]:
    return [(start, min(start + size, n)) for start in range(0, n, size)]


def _process_chunk(
    matcher: SpatialMatcher,
    interpolator: Interpolator,
    targets: Sequence[ObservationPoint],
    start: int,
    stop: int,
    *,
    need_nn: bool,
    need_idw: bool,
    method: str,
    collect: bool,
) -> _ChunkResult:
    messages = CollectingReporter() if collect else None
    if messages is not None:
        matcher = matcher.with_reporter(messages)
        interpolator = interpolator.with_reporter(messages)

    chunk = targets[start:stop]
    nn = matcher.find_nearest_neighbors(chunk, start_index=start) if need_nn else []
    idw = matcher.find_idw_neighbors(chunk, start_index=start) if need_idw else []

    if method == NEAREST:
        points = interpolator.resolve_nearest_all(chunk, nn, offset=start)
    else:
        points = interpolator.resolve_idw_all(chunk, idw, offset=start)

    return _ChunkResult(points, nn, idw, messages)


def regrid_points(
    source: Sequence[ObservationPoint],
    target: Sequence[ObservationPoint],
    config: RegridConfig,
    reporter: Optional[Reporter] = None,
    *,
    show_progress: bool = False,
) -> RegridResult:
    """
    Regrid ``source`` values onto ``target`` points.

    Parameters
    ----------
    source : sequence of ObservationPoint
        Source dataset; every point must have the same number of values.
    target : sequence of ObservationPoint
        Query points; their own values (if any) are ignored.
    config : RegridConfig
        Method, metric and search parameters. NN mappings are computed when
        ``method="nearest"`` or ``write_mappings`` is set; IDW mappings when
        ``method="idw"`` or ``write_mappings`` is set.
    reporter : Reporter or None
        Receives per-target warnings.
    show_progress : bool
        Show a chunk progress bar (serial runs only).

    Returns
    -------
    RegridResult
        Interpolated points in target order (unresolved targets dropped),
        plus the mappings that were computed.

    Raises
    ------
    NoSourceMatchError
        If ``source`` is empty, or if no target could be resolved.
    ValidationError
        If source value vectors differ in length or a coordinate is invalid.
    """
    reporter = ensure_reporter(reporter)
    if len(source) == 0:
        raise NoSourceMatchError("Source point list is empty")

    # value lengths are validated here, before any matching
    interpolator = Interpolator(source, config, reporter)
    matcher = SpatialMatcher(source, config, reporter)

    need_nn = config.method == NEAREST or config.write_mappings
    need_idw = config.method == IDW or config.write_mappings
    spans = _spans(len(target), config.chunk_size)
    parallel = config.n_jobs != 1 and len(spans) > 1

    kwargs = dict(need_nn=need_nn, need_idw=need_idw, method=config.method, collect=parallel)
    if parallel:
        parts = Parallel(n_jobs=config.n_jobs, prefer="threads")(
            delayed(_process_chunk)(matcher, interpolator, target, start, stop, **kwargs)
            for start, stop in spans
        )
    else:
        iterator = tqdm(spans, desc="Regridding", unit="chunk") if show_progress else spans
        parts = [
            _process_chunk(matcher, interpolator, target, start, stop, **kwargs)
            for start, stop in iterator
        ]

    result = RegridResult(points=[])
    for part in parts:
        if part.messages is not None:
            part.messages.replay(reporter)
        result.points.extend(part.points)
        result.nn_mappings.extend(part.nn_mappings)
        result.idw_mappings.extend(part.idw_mappings)

    if not result.points:
        mode = "NN" if config.method == NEAREST else "IDW"
        raise NoSourceMatchError(f"No points interpolated in {mode} mode")
    return result


class Regridder:
    """
    File pipeline around :func:`regrid_points`.

    Parameters
    ----------
    source_file, target_file : str or Path
        Whitespace-delimited (or CSV/Parquet) input files.
    config : RegridConfig
    reporter : Reporter or None
        Receives reader and engine warnings.
    """

    def __init__(
        self,
        source_file: Union[str, Path],
        target_file: Union[str, Path],
        config: RegridConfig,
        reporter: Optional[Reporter] = None,
    ):
        if not str(source_file) or not str(target_file):
            raise ValidationError("Source or target file path is empty")
        self.source_file = Path(source_file)
        self.target_file = Path(target_file)
        self.config = config
        self.reporter = ensure_reporter(reporter)

    def _say(self, msg: str) -> None:
        if self.config.verbose:
            tqdm.write(msg)

    def _check_headers(self, headers: List[str], target_headers: List[str]) -> None:
        if len(headers) < 3 or len(target_headers) < 3:
            raise ValidationError("Invalid headers in source or target file")
        if self.config.data_layout == GRID_BY_TIME and len(headers) != 3 + MONTHS_PER_ROW:
            raise ValidationError(
                "GRID_BY_TIME requires 12 monthly value columns plus Lon, Lat, Year"
            )
        if len(headers) != len(target_headers):
            raise ValidationError("Source and target files have different number of columns")

    def run(self) -> RegridResult:
        """
        Execute the pipeline and return the in-memory result.

        Files written into ``config.output_path``: source and target grid
        lists, ``regridded.txt`` and, with ``write_mappings``, the NN / IDW
        mapping files.
        """
        cfg = self.config
        source_reader = InputReader(self.source_file, cfg, self.reporter)
        target_reader = InputReader(self.target_file, cfg, self.reporter)

        self._say(f"Reading source data from: {self.source_file}")
        self._say(f"Reading target data from: {self.target_file}")
        source_points = source_reader.read_grid()
        target_points = target_reader.read_grid()

        headers = source_reader.read_headers()
        self._check_headers(headers, target_reader.read_headers())

        writer = OutputWriter(cfg)
        source_reader.write_gridlist(SOURCE_GRIDLIST_FILE)
        target_reader.write_gridlist(TARGET_GRIDLIST_FILE)

        self._say("Computing spatial mappings and interpolating values...")
        result = regrid_points(
            source_points,
            target_points,
            cfg,
            self.reporter,
            show_progress=cfg.verbose,
        )

        self._say(f"Writing outputs to: {cfg.output_path}")
        if cfg.write_mappings:
            if result.nn_mappings:
                writer.write_nn_mappings(result.nn_mappings)
            if result.idw_mappings:
                writer.write_idw_mappings(result.idw_mappings)
        writer.write_regridded_data(result.points, REGRIDDED_FILE, headers)

        self._say("Regridding completed successfully.")
        return result


__all__ = [
    "REGRIDDED_FILE",
    "SOURCE_GRIDLIST_FILE",
    "TARGET_GRIDLIST_FILE",
    "RegridResult",
    "regrid_points",
    "Regridder",
]
