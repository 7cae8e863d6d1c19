# SPDX-License-Identifier: MIT
"""
Command-line entry point.

Example
-------
    pointregrid source.txt target.txt --method idw --radius 100 --power 2 \\
        --min-points 2 --max-points 4 --write-mappings --output-path output/
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import SUPPORTED_LAYOUTS, SUPPORTED_METHODS, RegridConfig
from .exceptions import PointRegridError
from .regrid import Regridder
from .reporting import LoggingReporter, setup_logging
from .spatial import SUPPORTED_METRICS

logger = logging.getLogger("pointregrid")


def build_parser() -> argparse.ArgumentParser:
    defaults = RegridConfig()
    parser = argparse.ArgumentParser(
        prog="pointregrid",
        description="Regrid point time series onto target points (NN or IDW).",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("source", help="source data file")
    parser.add_argument("target", help="target data file")
    parser.add_argument("-m", "--method", choices=SUPPORTED_METHODS, default=defaults.method)
    parser.add_argument("--metric", choices=SUPPORTED_METRICS, default=defaults.distance_metric)
    parser.add_argument("--layout", choices=SUPPORTED_LAYOUTS, default=defaults.data_layout)
    parser.add_argument("-r", "--radius", type=float, default=defaults.radius, help="IDW search radius (km)")
    parser.add_argument("-p", "--power", type=float, default=defaults.power, help="IDW power")
    parser.add_argument("--min-points", type=int, default=None, help="fallback threshold (default: max points)")
    parser.add_argument("--max-points", type=int, default=defaults.max_points)
    parser.add_argument("--precision", type=int, default=defaults.precision, help="output decimals")
    parser.add_argument(
        "--no-adjust-longitude",
        action="store_true",
        help="keep longitudes as read instead of wrapping into [-180, 180]",
    )
    parser.add_argument("--write-mappings", action="store_true", help="write NN/IDW mapping files")
    parser.add_argument("-o", "--output-path", default=defaults.output_path)
    parser.add_argument("--chunk-size", type=int, default=defaults.chunk_size)
    parser.add_argument("-j", "--n-jobs", type=int, default=defaults.n_jobs, help="-1 = all cores")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace) -> RegridConfig:
    return RegridConfig(
        method=args.method,
        distance_metric=args.metric,
        data_layout=args.layout,
        radius=args.radius,
        power=args.power,
        max_points=args.max_points,
        min_points=args.min_points,
        adjust_longitude=not args.no_adjust_longitude,
        precision=args.precision,
        verbose=args.verbose,
        write_mappings=args.write_mappings,
        output_path=args.output_path,
        chunk_size=args.chunk_size,
        n_jobs=args.n_jobs,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(args.output_path, level=logging.DEBUG if args.verbose else logging.INFO)
    reporter = LoggingReporter(logger)

    try:
        config = config_from_args(args)
        Regridder(args.source, args.target, config, reporter).run()
    except (PointRegridError, OSError) as exc:
        reporter.error(f"Regridding failed: {exc}")
        return 1

    logger.info("Regridding completed successfully. Outputs written to: %s", config.output_path)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
