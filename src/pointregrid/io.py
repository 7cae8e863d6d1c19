# SPDX-License-Identifier: MIT
"""
pointregrid.io
==============

Reading and writing whitespace-delimited grid files.

Input format
------------
A header line followed by one row per (cell, time step)::

    Lon    Lat    Year   Jan   Feb   ...   Dec
    87.25  46.25  2020   1.0   2.0   ...   12.0

With ``data_layout="grid_by_time"`` exactly 12 values are read per row;
with ``"year_by_year"`` every numeric token after the time step is a value.
Files ending in ``.csv`` or ``.parquet`` are read with pandas instead and
must carry the same columns.

Output
------
- ``regridded.txt``: same layout as the input, fixed-point at
  ``config.precision`` (``.csv`` / ``.parquet`` names go through pandas);
- ``nn_mappings.txt`` / ``idw_mappings.txt``: diagnostic mapping tables;
- ``source_gridlist.txt`` / ``target_gridlist.txt``: unique coordinates.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Literal, Optional, Sequence, Union

import pandas as pd

from .config import GRID_BY_TIME, YEAR_BY_YEAR, RegridConfig
from .exceptions import ValidationError
from .records import IDWMapping, NNMapping, ObservationPoint
from .reporting import Reporter, ensure_reporter
from .spatial import normalize_longitude
from .tables import points_from_frame, points_to_frame

MONTHS_PER_ROW = 12

PathLike = Union[str, Path]


def infer_format(path: PathLike) -> Literal["text", "csv", "parquet"]:
    p = str(path).lower()
    if p.endswith(".parquet"):
        return "parquet"
    if p.endswith((".csv", ".csv.gz", ".csv.bz2", ".csv.xz", ".csv.zip")):
        return "csv"
    return "text"


def _to_float(token: str) -> Optional[float]:
    try:
        value = float(token)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _to_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


class InputReader:
    """
    Reader for one source or target file.

    Parameters
    ----------
    filename : str or Path
        Input file.
    config : RegridConfig
        Uses ``data_layout``, ``adjust_longitude``, ``precision`` and
        ``output_path``.
    reporter : Reporter or None
        Receives a warning for every skipped malformed line.
    """

    def __init__(
        self,
        filename: PathLike,
        config: RegridConfig,
        reporter: Optional[Reporter] = None,
    ):
        self.filename = Path(filename)
        self.config = config
        self.reporter = ensure_reporter(reporter)
        self._points: Optional[List[ObservationPoint]] = None

    def _require_file(self) -> None:
        if not self.filename.is_file():
            raise FileNotFoundError(f"Cannot open input file: {self.filename}")

    def _load_frame(self) -> pd.DataFrame:
        if infer_format(self.filename) == "parquet":
            return pd.read_parquet(self.filename)
        return pd.read_csv(self.filename)

    # ------------------------------------------------------------------ #

    def read_headers(self) -> List[str]:
        """Header tokens of the file (column names for CSV/Parquet)."""
        self._require_file()
        if infer_format(self.filename) != "text":
            return [str(c) for c in self._load_frame().columns]
        with self.filename.open("r", encoding="utf-8") as fh:
            first = fh.readline()
        return first.split()

    def read_grid(self) -> List[ObservationPoint]:
        """
        Parse every data row into an :class:`ObservationPoint`.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        ValidationError
            On out-of-range coordinates, missing values, or a file without
            any valid row.
        """
        if self._points is not None:
            return self._points

        self._require_file()
        if infer_format(self.filename) == "text":
            points = self._read_text()
        else:
            points = self._read_table()

        if not points:
            raise ValidationError(f"Empty input file: {self.filename}")
        self._points = points
        return points

    def _read_table(self) -> List[ObservationPoint]:
        df = self._load_frame()
        if df.shape[1] < 3:
            raise ValidationError(f"Expected Lon, Lat, time-step columns in {self.filename}")
        lon_col, lat_col, time_col = df.columns[:3]
        value_cols = list(df.columns[3:])
        if self.config.data_layout == GRID_BY_TIME:
            if len(value_cols) < MONTHS_PER_ROW:
                raise ValidationError(f"Missing monthly values in file: {self.filename}")
            value_cols = value_cols[:MONTHS_PER_ROW]
        elif not value_cols:
            raise ValidationError(f"No values found in file: {self.filename}")
        return points_from_frame(
            df,
            lon_col=lon_col,
            lat_col=lat_col,
            time_col=time_col,
            value_cols=value_cols,
            adjust_longitude=self.config.adjust_longitude,
        )

    def _read_text(self) -> List[ObservationPoint]:
        cfg = self.config
        points: List[ObservationPoint] = []

        with self.filename.open("r", encoding="utf-8") as fh:
            fh.readline()  # header
            for line_num, line in enumerate(fh, start=2):
                tokens = line.split()
                if not tokens:
                    continue

                lon = _to_float(tokens[0])
                lat = _to_float(tokens[1]) if len(tokens) > 1 else None
                step = _to_int(tokens[2]) if len(tokens) > 2 else None
                if lon is None or lat is None or step is None:
                    self.reporter.warn(
                        f"Skipping malformed line {line_num} in file: {self.filename}"
                    )
                    continue

                if abs(lat) > 90.0 or abs(lon) > 360.0:
                    raise ValidationError(
                        f"Invalid coordinates at line {line_num} in file: {self.filename}"
                    )
                if cfg.adjust_longitude:
                    lon = normalize_longitude(lon)

                rest = tokens[3:]
                if cfg.data_layout == GRID_BY_TIME:
                    values = [_to_float(t) for t in rest[:MONTHS_PER_ROW]]
                    if len(values) < MONTHS_PER_ROW or any(v is None for v in values):
                        raise ValidationError(
                            f"Missing monthly values at line {line_num} in file: {self.filename}"
                        )
                elif cfg.data_layout == YEAR_BY_YEAR:
                    values = []
                    for t in rest:
                        v = _to_float(t)
                        if v is None:
                            break
                        values.append(v)
                    if not values:
                        raise ValidationError(
                            f"No values found at line {line_num} in file: {self.filename}"
                        )
                else:
                    raise ValidationError(f"Unknown data layout '{cfg.data_layout}'")

                points.append(ObservationPoint.from_lonlat(lon, lat, step, values))

        return points

    def read_frame(self) -> pd.DataFrame:
        """The parsed rows as a DataFrame, labelled with the file's header."""
        headers = self.read_headers()
        points = self.read_grid()
        n_values = len(points[0].values)
        columns = headers[: 3 + n_values] if len(headers) >= 3 + n_values else None
        return points_to_frame(points, columns=columns)

    def write_gridlist(self, output_filename: str) -> Optional[Path]:
        """
        Write the unique, sorted (lon, lat) pairs of this file into
        ``config.output_path``. Returns the written path, or None (with a
        warning) if the file cannot be opened.
        """
        pairs = sorted({(p.longitude, p.latitude) for p in self.read_grid()})
        dest = Path(self.config.output_path) / output_filename
        prec = self.config.precision
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with dest.open("w", encoding="utf-8") as fh:
                fh.write("Lon\t Lat\n")
                for lon, lat in pairs:
                    fh.write(f"{lon:10.{prec}f}{lat:10.{prec}f}\n")
        except OSError:
            self.reporter.warn(f"Cannot open gridlist file: {dest}")
            return None
        return dest


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


class OutputWriter:
    """
    Writer for regridded data and diagnostic mapping files.

    The output directory (``config.output_path``) is created, parents
    included, when the writer is constructed.
    """

    NN_HEADER = "Target_Lon Target_Lat Source_Lon Source_Lat Distance(km) Target_Index"
    IDW_HEADER = NN_HEADER + " Fallback"

    def __init__(self, config: RegridConfig):
        self.config = config
        self.output_path = Path(config.output_path or "./")
        self.output_path.mkdir(parents=True, exist_ok=True)

    def _fmt(self, value: float, width: int) -> str:
        return f"{value:{width}.{self.config.precision}f}"

    def write_regridded_data(
        self,
        points: Sequence[ObservationPoint],
        filename: str,
        headers: Sequence[str],
    ) -> Path:
        """
        Write interpolated points with the given header.

        Plain text uses widths of 10 for the first three columns and 12 for
        the values. ``.csv`` / ``.parquet`` filenames are written through
        pandas with the header tokens as column names.
        """
        dest = self.output_path / filename
        fmt = infer_format(dest)
        if fmt != "text":
            df = points_to_frame(points, columns=list(headers))
            if fmt == "parquet":
                df.to_parquet(dest, index=False)
            else:
                df.to_csv(dest, index=False)
            return dest

        with dest.open("w", encoding="utf-8") as fh:
            fh.write("".join(f"{h:>{10 if i < 3 else 12}}" for i, h in enumerate(headers)))
            fh.write("\n")
            for p in points:
                fh.write(self._fmt(p.longitude, 10))
                fh.write(self._fmt(p.latitude, 10))
                fh.write(f"{p.time_step:10d}")
                fh.write("".join(self._fmt(v, 12) for v in p.values))
                fh.write("\n")
        return dest

    def write_nn_mappings(self, mappings: Sequence[NNMapping]) -> Optional[Path]:
        if not self.config.write_mappings:
            return None
        dest = self.output_path / self.config.nn_mappings_file
        sep = "-" * 68 + "\n"
        with dest.open("w", encoding="utf-8") as fh:
            fh.write(self.NN_HEADER + "\n")
            fh.write(sep)
            for m in mappings:
                fh.write(
                    self._fmt(m.target.longitude, 10)
                    + self._fmt(m.target.latitude, 10)
                    + self._fmt(m.source.longitude, 10)
                    + self._fmt(m.source.latitude, 10)
                    + self._fmt(m.distance_km, 12)
                    + f"{m.target_index:12d}\n"
                )
                fh.write(sep)
        return dest

    def write_idw_mappings(self, mappings: Sequence[IDWMapping]) -> Optional[Path]:
        if not self.config.write_mappings:
            return None
        dest = self.output_path / self.config.idw_mappings_file
        sep = "-" * 80 + "\n"
        with dest.open("w", encoding="utf-8") as fh:
            fh.write(self.IDW_HEADER + "\n")
            fh.write(sep)
            for m in mappings:
                flag = "NN" if m.is_fallback else ""
                for cand in m.candidates:
                    fh.write(
                        self._fmt(m.target.longitude, 10)
                        + self._fmt(m.target.latitude, 10)
                        + self._fmt(cand.coordinate.longitude, 10)
                        + self._fmt(cand.coordinate.latitude, 10)
                        + self._fmt(cand.distance_km, 12)
                        + f"{m.target_index:12d}"
                        + f"{flag:>8}\n"
                    )
                fh.write(sep)
        return dest


__all__ = [
    "MONTHS_PER_ROW",
    "infer_format",
    "InputReader",
    "OutputWriter",
]
