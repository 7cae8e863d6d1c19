# tests/test_viz.py
import pandas as pd
import matplotlib

# Use non-interactive backend for tests
matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.axes import Axes

from pointregrid import ObservationPoint, RegridConfig, regrid_points
from pointregrid.viz import (
    plot_fallback_share,
    plot_mapping_distances,
    plot_source_target_map,
)


def _result():
    source = [
        ObservationPoint.from_lonlat(87.25, 46.25, 2020, [1.0]),
        ObservationPoint.from_lonlat(86.25, 46.25, 2020, [3.0]),
        ObservationPoint.from_lonlat(87.75, 46.10, 2020, [2.0]),
    ]
    target = [
        ObservationPoint.from_lonlat(88.0, 46.0, 2020),
        ObservationPoint.from_lonlat(80.0, 40.0, 2020),
    ]
    cfg = RegridConfig(method="idw", radius=100.0, min_points=2, max_points=4, write_mappings=True)
    return source, target, regrid_points(source, target, cfg)


def test_plot_mapping_distances_from_records_and_frame():
    _, _, result = _result()

    ax = plot_mapping_distances(result.nn_mappings, radius=100.0)
    assert isinstance(ax, Axes)
    assert ax.get_xlabel() == "Distance (km)"

    fig, ax2 = plt.subplots()
    out = plot_mapping_distances(result.idw_frame(), ax=ax2)
    assert out is ax2

    plt.close("all")


def test_plot_mapping_distances_empty():
    ax = plot_mapping_distances(pd.DataFrame(columns=["distance_km"]))
    assert isinstance(ax, Axes)
    assert ax.texts[0].get_text() == "No mappings"
    plt.close("all")


def test_plot_source_target_map():
    source, target, result = _result()
    ax = plot_source_target_map(source, target, nn_mappings=result.nn_mappings)
    assert isinstance(ax, Axes)
    assert len(ax.collections) >= 3  # two scatters + mapping lines

    empty = plot_source_target_map([], [])
    assert empty.texts[0].get_text() == "No points"
    plt.close("all")


def test_plot_fallback_share():
    _, _, result = _result()
    ax = plot_fallback_share(result.idw_mappings)
    assert isinstance(ax, Axes)
    assert "Fallback share" in ax.get_title()
    assert len(ax.patches) == 2

    empty = plot_fallback_share([])
    assert empty.texts[0].get_text() == "No IDW mappings"
    plt.close("all")
