# SPDX-License-Identifier: MIT
"""
pointregrid.viz
===============

Plotting helpers to inspect a regrid run.

- :func:`plot_mapping_distances` – histogram of matched distances (km).
- :func:`plot_source_target_map` – source and target points on the
  lon/lat plane, optionally linked by their nearest-neighbor mapping.
- :func:`plot_fallback_share` – how many IDW targets fell back to NN.

Design principles
-----------------

* Minimal dependencies: matplotlib, numpy, pandas only.
* Functions return an Axes; a Figure is created only when ``ax`` is None.
* Empty inputs render a "No data" message instead of failing.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection
from matplotlib.figure import Figure

from .records import IDWMapping, NNMapping, ObservationPoint
from .tables import idw_mappings_to_frame, nn_mappings_to_frame, validate_required_columns


# --------------------------------------------------------------------- #
# Internal helpers
# --------------------------------------------------------------------- #


def _ensure_ax(
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (8.0, 4.0),
) -> Tuple[Figure, Axes, bool]:
    """
    Create a new Figure/Axes if ``ax`` is None.

    Returns
    -------
    (fig, ax, created_flag)
        created_flag is True if a new Figure/Axes was created, False otherwise.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        return fig, ax, True
    return ax.figure, ax, False


def _no_data(ax: Axes, message: str = "No data") -> Axes:
    """
    Render a centered 'No data' message on the provided axes.
    """
    ax.cla()
    ax.text(0.5, 0.5, message, ha="center", va="center", fontsize=12)
    ax.set_xticks([])
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_visible(False)
    return ax


def _mapping_frame(
    mappings: Union[pd.DataFrame, Sequence[NNMapping], Sequence[IDWMapping]],
) -> pd.DataFrame:
    if isinstance(mappings, pd.DataFrame):
        return mappings
    if len(mappings) and isinstance(mappings[0], IDWMapping):
        return idw_mappings_to_frame(mappings)  # type: ignore[arg-type]
    return nn_mappings_to_frame(mappings)  # type: ignore[arg-type]


# --------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------- #


def plot_mapping_distances(
    mappings: Union[pd.DataFrame, Sequence[NNMapping], Sequence[IDWMapping]],
    *,
    radius: Optional[float] = None,
    bins: int = 30,
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (8.0, 4.0),
) -> Axes:
    """
    Histogram of matched source distances.

    Parameters
    ----------
    mappings : DataFrame or sequence of NNMapping / IDWMapping
        Mapping records, or a table with a ``distance_km`` column (see
        :mod:`pointregrid.tables`).
    radius : float or None
        If given, draw the search radius as a vertical line.
    bins : int
        Number of histogram bins.
    ax : Axes or None
        Axes to draw on. If None, create a new Figure/Axes.
    figsize : (float, float)
        Figure size used when ``ax`` is None.

    Returns
    -------
    Axes
    """
    fig, ax, _ = _ensure_ax(ax, figsize)

    df = _mapping_frame(mappings)
    if df.empty:
        return _no_data(ax, "No mappings")
    validate_required_columns(df, ["distance_km"], context="plot_mapping_distances")

    values = pd.to_numeric(df["distance_km"], errors="coerce").dropna().to_numpy()
    if values.size == 0:
        return _no_data(ax, "No numeric distances")

    ax.hist(values, bins=bins, alpha=0.8)
    if radius is not None:
        ax.axvline(radius, color="k", linestyle="--", linewidth=1, label="radius")
        ax.legend(loc="best")
    ax.set_xlabel("Distance (km)")
    ax.set_ylabel("Frequency")
    ax.set_title("Distribution of matched distances")
    return ax


def plot_source_target_map(
    source: Sequence[ObservationPoint],
    target: Sequence[ObservationPoint],
    *,
    nn_mappings: Optional[Sequence[NNMapping]] = None,
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (6.0, 5.0),
) -> Axes:
    """
    Source and target locations on the lon/lat plane.

    When ``nn_mappings`` is given, each target is linked to its selected
    source by a thin line.
    """
    fig, ax, _ = _ensure_ax(ax, figsize)

    if len(source) == 0 and len(target) == 0:
        return _no_data(ax, "No points")

    if len(source):
        xy = np.array([(p.longitude, p.latitude) for p in source])
        ax.scatter(xy[:, 0], xy[:, 1], s=12, marker="o", label="source")
    if len(target):
        xy = np.array([(p.longitude, p.latitude) for p in target])
        ax.scatter(xy[:, 0], xy[:, 1], s=24, marker="x", label="target")

    if nn_mappings:
        segments = [
            [(m.target.longitude, m.target.latitude), (m.source.longitude, m.source.latitude)]
            for m in nn_mappings
        ]
        ax.add_collection(LineCollection(segments, linewidths=0.6, colors="0.5"))

    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title("Source and target points")
    ax.legend(loc="best")
    return ax


def plot_fallback_share(
    idw_mappings: Sequence[IDWMapping],
    *,
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (5.0, 4.0),
) -> Axes:
    """
    Bar chart of IDW targets resolved by radius search vs. NN fallback.
    """
    fig, ax, _ = _ensure_ax(ax, figsize)

    if len(idw_mappings) == 0:
        return _no_data(ax, "No IDW mappings")

    n_fallback = sum(1 for m in idw_mappings if m.is_fallback)
    n_idw = len(idw_mappings) - n_fallback

    ax.bar(["IDW", "NN fallback"], [n_idw, n_fallback])
    ax.set_ylabel("Targets")
    ax.grid(axis="y", alpha=0.3)
    ax.set_title(f"Fallback share: {n_fallback / len(idw_mappings):.1%}")
    return ax


__all__ = [
    "plot_mapping_distances",
    "plot_source_target_map",
    "plot_fallback_share",
]
