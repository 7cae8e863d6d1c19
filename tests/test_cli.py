# tests/test_cli.py

import logging

import pytest

from pointregrid.cli import build_parser, config_from_args, main
from pointregrid.reporting import LOGGER_NAME

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger(LOGGER_NAME)
    before = list(logger.handlers)
    level = logger.level
    yield
    for h in list(logger.handlers):
        if h not in before:
            logger.removeHandler(h)
            h.close()
    logger.setLevel(level)


def _grid_file(path, rows):
    lines = ["Lon Lat Year " + " ".join(MONTHS)]
    for lon, lat, year in rows:
        lines.append(f"{lon} {lat} {year} " + " ".join(str(float(m)) for m in range(12)))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_parser_maps_to_config():
    args = build_parser().parse_args(
        [
            "src.txt",
            "tgt.txt",
            "--method",
            "nearest",
            "--metric",
            "euclidean",
            "--radius",
            "50",
            "--min-points",
            "2",
            "--max-points",
            "4",
            "--no-adjust-longitude",
            "--n-jobs",
            "-1",
        ]
    )
    cfg = config_from_args(args)
    assert cfg.method == "nearest"
    assert cfg.distance_metric == "euclidean"
    assert cfg.radius == 50.0
    assert (cfg.min_points, cfg.max_points) == (2, 4)
    assert cfg.adjust_longitude is False
    assert cfg.n_jobs == -1
    assert cfg.write_mappings is False


def test_main_success(tmp_path):
    src = _grid_file(tmp_path / "source.txt", [(87.25, 46.25, 2020), (86.25, 46.25, 2020)])
    tgt = _grid_file(tmp_path / "target.txt", [(88.0, 46.0, 2020)])
    out = tmp_path / "out"

    code = main([str(src), str(tgt), "--method", "idw", "--min-points", "1", "--max-points", "4",
                 "--write-mappings", "--output-path", str(out)])

    assert code == 0
    assert (out / "regridded.txt").exists()
    assert (out / "idw_mappings.txt").exists()
    assert list((out / "logs").glob("pointregrid_*.log"))


def test_main_failure_returns_one(tmp_path):
    src = _grid_file(tmp_path / "source.txt", [(87.25, 46.25, 2020)])
    code = main([str(src), str(tmp_path / "missing.txt"), "--output-path", str(tmp_path / "out")])
    assert code == 1

    code = main([str(src), str(src), "--min-points", "9", "--max-points", "2",
                 "--output-path", str(tmp_path / "out")])
    assert code == 1


def test_main_rejects_unknown_method(capsys):
    with pytest.raises(SystemExit):
        main(["a.txt", "b.txt", "--method", "kriging"])
