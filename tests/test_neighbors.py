# tests/test_neighbors.py

import numpy as np
import pytest
from sklearn.metrics.pairwise import haversine_distances

from pointregrid.config import RegridConfig
from pointregrid.exceptions import NoSourceMatchError, ValidationError
from pointregrid.neighbors import SpatialMatcher
from pointregrid.records import Coordinate, ObservationPoint
from pointregrid.reporting import CollectingReporter
from pointregrid.spatial import EARTH_RADIUS_KM, KM_PER_DEGREE


def _points(lonlats, step=2020):
    return [ObservationPoint.from_lonlat(lon, lat, step, [float(i)]) for i, (lon, lat) in enumerate(lonlats)]


def test_nearest_matches_brute_force():
    rng = np.random.default_rng(42)
    src_xy = np.column_stack([rng.uniform(80, 90, 60), rng.uniform(40, 50, 60)])
    tgt_xy = np.column_stack([rng.uniform(80, 90, 25), rng.uniform(40, 50, 25)])
    source = _points(src_xy)
    matcher = SpatialMatcher(source, RegridConfig(method="nearest", radius=1e4))

    ref = haversine_distances(
        np.radians(tgt_xy[:, ::-1]), np.radians(src_xy[:, ::-1])
    ) * EARTH_RADIUS_KM

    mappings = matcher.find_nearest_neighbors([Coordinate(*xy) for xy in tgt_xy])
    assert [m.target_index for m in mappings] == list(range(len(tgt_xy)))
    for m, row in zip(mappings, ref):
        j = int(np.argmin(row))
        assert m.source == source[j].coordinate
        assert m.distance_km == pytest.approx(row[j], rel=1e-9, abs=1e-6)


def test_nearest_tie_goes_to_first_source():
    source = _points([(1.0, 0.0), (-1.0, 0.0)])
    m = SpatialMatcher(source, RegridConfig()).nearest_neighbor(Coordinate(0.0, 0.0))
    assert m.source == Coordinate(1.0, 0.0)

    source = _points([(-1.0, 0.0), (1.0, 0.0)])
    m = SpatialMatcher(source, RegridConfig()).nearest_neighbor(Coordinate(0.0, 0.0))
    assert m.source == Coordinate(-1.0, 0.0)


def test_nearest_beyond_radius_warns():
    rep = CollectingReporter()
    source = _points([(5.0, 0.0)])
    m = SpatialMatcher(source, RegridConfig(radius=10.0), rep).nearest_neighbor(Coordinate(0.0, 0.0))
    assert m.distance_km > 10.0
    assert len(rep.warnings) == 1
    assert "exceeding radius" in rep.warnings[0]


def test_radius_min_points_boundary():
    # three sources at ~11, ~22, ~33 km; radius 25 km keeps two
    source = _points([(0.1, 0.0), (0.2, 0.0), (0.3, 0.0)])
    target = Coordinate(0.0, 0.0)

    rep = CollectingReporter()
    cfg = RegridConfig(radius=25.0, min_points=2, max_points=4)
    m = SpatialMatcher(source, cfg, rep).radius_neighbors(target)
    assert not m.is_fallback
    assert [c.coordinate for c in m.candidates] == [source[0].coordinate, source[1].coordinate]
    assert rep.warnings == []

    rep = CollectingReporter()
    cfg = cfg.with_options(min_points=3)
    m = SpatialMatcher(source, cfg, rep).radius_neighbors(target)
    assert m.is_fallback
    assert len(m.candidates) == 1
    assert m.candidates[0].coordinate == source[0].coordinate
    assert len(rep.warnings) == 1
    assert "falling back" in rep.warnings[0]


def test_radius_candidates_sorted_truncated_and_stable():
    source = _points([(0.3, 0.0), (-0.1, 0.0), (0.1, 0.0), (0.2, 0.0), (0.05, 0.0)])
    cfg = RegridConfig(radius=100.0, min_points=1, max_points=3)
    m = SpatialMatcher(source, cfg).radius_neighbors(Coordinate(0.0, 0.0))

    lons = [c.coordinate.longitude for c in m.candidates]
    # -0.1 and 0.1 are equidistant: source order decides
    assert lons == [0.05, -0.1, 0.1]

    dists = [c.distance_km for c in m.candidates]
    assert dists == sorted(dists)
    assert all(d <= cfg.radius for d in dists)


def test_radius_candidates_never_exceed_max_points():
    rng = np.random.default_rng(3)
    source = _points(np.column_stack([rng.uniform(-0.5, 0.5, 40), rng.uniform(-0.5, 0.5, 40)]))
    cfg = RegridConfig(radius=80.0, min_points=1, max_points=5)
    m = SpatialMatcher(source, cfg).radius_neighbors(Coordinate(0.0, 0.0))
    assert 1 <= len(m.candidates) <= 5


def test_euclidean_reports_km():
    source = _points([(1.0, 0.0)])
    cfg = RegridConfig(distance_metric="euclidean", radius=100.0, min_points=1, max_points=2)
    matcher = SpatialMatcher(source, cfg)

    nn = matcher.nearest_neighbor(Coordinate(0.0, 0.0))
    assert nn.distance_km == pytest.approx(KM_PER_DEGREE)

    # 1 degree ~ 111 km is outside a 100 km radius
    idw = matcher.radius_neighbors(Coordinate(0.0, 0.0))
    assert idw.is_fallback
    assert idw.candidates[0].distance_km == pytest.approx(KM_PER_DEGREE)

    wide = SpatialMatcher(source, cfg.with_options(radius=120.0))
    idw = wide.radius_neighbors(Coordinate(0.0, 0.0))
    assert not idw.is_fallback


def test_batch_start_index_and_observation_targets():
    source = _points([(0.0, 0.0), (1.0, 1.0)])
    targets = _points([(0.1, 0.1), (0.9, 0.9)], step=2021)
    matcher = SpatialMatcher(source, RegridConfig(min_points=1, max_points=2))

    nn = matcher.find_nearest_neighbors(targets, start_index=10)
    assert [m.target_index for m in nn] == [10, 11]
    assert nn[1].source == Coordinate(1.0, 1.0)

    idw = matcher.find_idw_neighbors(targets, start_index=10)
    assert [m.target_index for m in idw] == [10, 11]


def test_empty_source_raises_lookup_error():
    with pytest.raises(NoSourceMatchError):
        SpatialMatcher([], RegridConfig())
    with pytest.raises(LookupError):
        SpatialMatcher([], RegridConfig(method="nearest"))


def test_invalid_target_coordinate():
    matcher = SpatialMatcher(_points([(0.0, 0.0)]), RegridConfig())
    with pytest.raises(ValidationError):
        matcher.nearest_neighbor(Coordinate(0.0, 95.0))


def test_with_reporter_shares_sources():
    matcher = SpatialMatcher(_points([(0.0, 0.0)]), RegridConfig())
    rep = CollectingReporter()
    clone = matcher.with_reporter(rep)
    assert clone.source_points is matcher.source_points
    assert clone.reporter is rep
    assert matcher.reporter is not rep
