# tests/test_config.py

import dataclasses

import pytest

from pointregrid.config import GRID_BY_TIME, IDW, NEAREST, RegridConfig
from pointregrid.exceptions import ConfigurationError


def test_defaults():
    cfg = RegridConfig()
    assert cfg.method == IDW
    assert cfg.distance_metric == "haversine"
    assert cfg.data_layout == GRID_BY_TIME
    assert cfg.radius == 100.0
    assert cfg.power == 2.0
    assert cfg.max_points == 5
    # min_points defaults to max_points
    assert cfg.min_points == 5
    assert cfg.adjust_longitude is True
    assert cfg.precision == 5
    assert cfg.n_jobs == 1
    assert cfg.is_idw


def test_names_are_normalized():
    cfg = RegridConfig(method="NEAREST", distance_metric="Euclidean", data_layout="Year_By_Year")
    assert cfg.method == NEAREST
    assert cfg.distance_metric == "euclidean"
    assert cfg.data_layout == "year_by_year"
    assert not cfg.is_idw


@pytest.mark.parametrize(
    "kwargs",
    [
        {"method": "kriging"},
        {"distance_metric": "manhattan"},
        {"data_layout": "daily"},
        {"radius": -1.0},
        {"power": 0.0},
        {"max_points": 0},
        {"min_points": 0},
        {"min_points": 6, "max_points": 5},
        {"precision": -1},
        {"nn_mappings_file": ""},
        {"idw_mappings_file": ""},
        {"chunk_size": 0},
        {"n_jobs": 0},
    ],
)
def test_invalid_values_raise(kwargs):
    with pytest.raises(ConfigurationError):
        RegridConfig(**kwargs)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        RegridConfig(power=-2)


def test_config_is_frozen():
    cfg = RegridConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.radius = 5.0


def test_from_mapping_and_to_dict():
    cfg = RegridConfig.from_mapping({"method": "nearest", "radius": 50, "max_points": 3})
    assert cfg.method == NEAREST
    assert cfg.radius == 50.0
    assert cfg.min_points == 3

    again = RegridConfig.from_mapping(cfg.to_dict())
    assert again == cfg


def test_from_mapping_rejects_unknown_keys():
    with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
        RegridConfig.from_mapping({"radius": 10, "neighbours": 3})


def test_with_options_validates():
    cfg = RegridConfig(min_points=2, max_points=4)
    other = cfg.with_options(distance_metric="euclidean")
    assert other.distance_metric == "euclidean"
    assert other.min_points == 2
    assert cfg.distance_metric == "haversine"

    with pytest.raises(ConfigurationError):
        cfg.with_options(max_points=1)
