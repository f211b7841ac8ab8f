"""
bundle-analyzer command line.

Usage:
    bundle-analyzer dist/stats.json                    # live server on :8888
    bundle-analyzer dist/stats.json dist -p 9000       # explicit bundle dir, port
    bundle-analyzer dist/stats.json -m json -r out.json
    bundle-analyzer dist/stats.json -e "vendor" -e "\\.map$"

The bundle directory defaults to the stats file's directory; real parsed
and gzip sizes are only available when the bundles can be read from it.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from bundle_analyzer.analytics.chart_data import get_chart_data
from bundle_analyzer.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_REPORT_FILENAME,
    AnalyzerOptions,
    ServerSettings,
)
from bundle_analyzer.errors import StatsFileError
from bundle_analyzer.log import LOG_LEVELS, configure_logging
from bundle_analyzer.stats_io import read_stats_from_file, write_json_report

MODES = ["server", "json"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bundle-analyzer",
        description="Treemap size report (stat / parsed / gzip) from a bundler stats JSON file.",
    )
    parser.add_argument("stats_file", help="Path to the bundler stats JSON file")
    parser.add_argument("bundle_dir", nargs="?", default=None,
                        help="Directory holding the bundle files (default: stats file directory)")
    parser.add_argument("-m", "--mode", choices=MODES, default="server")
    parser.add_argument("-H", "--host", default=DEFAULT_HOST)
    parser.add_argument("-p", "--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("-r", "--report", default=DEFAULT_REPORT_FILENAME,
                        help="JSON report file (json mode), relative to the bundle dir")
    parser.add_argument("-t", "--title", default=None)
    parser.add_argument("-s", "--default-sizes", choices=["stat", "parsed", "gzip"], default="parsed")
    parser.add_argument("-e", "--exclude", action="append", default=None,
                        help="Regex of asset names to leave out (repeatable)")
    parser.add_argument("-l", "--log-level", choices=LOG_LEVELS, default="info")
    return parser


def generate_json_report(
    bundle_stats: dict,
    report_filename: str | Path,
    bundle_dir: Optional[Path],
    options: AnalyzerOptions,
) -> Optional[Path]:
    chart_data = get_chart_data(bundle_stats, bundle_dir, options)
    if not chart_data:
        return None
    path = write_json_report(report_filename, chart_data)
    options.logger.info(f"Bundle Analyzer saved JSON report to {path}")
    return path


def run_server(bundle_stats: dict, settings: ServerSettings, options: AnalyzerOptions) -> bool:
    import uvicorn

    from bundle_analyzer.main import create_app
    from bundle_analyzer.state import ReportStateChannel

    channel = ReportStateChannel.from_stats(bundle_stats, settings.bundle_dir, options)
    if channel.chart_data is None:
        return False

    options.logger.info(
        f"Bundle Analyzer is started at http://{settings.host}:{settings.port}\n"
        "Use Ctrl+C to close it"
    )
    uvicorn.run(
        create_app(channel, settings),
        host=settings.host,
        port=settings.port,
        log_level="warning",
    )
    return True


def main(argv: Optional[list[str]] = None) -> int:
    args   = build_parser().parse_args(argv)
    logger = configure_logging(args.log_level)

    stats_path = Path(args.stats_file)
    bundle_dir = Path(args.bundle_dir) if args.bundle_dir else stats_path.resolve().parent

    try:
        bundle_stats = read_stats_from_file(stats_path)
    except StatsFileError as err:
        logger.error(f"Couldn't read webpack bundle stats from {stats_path}: {err}")
        return 1

    options = AnalyzerOptions(
        exclude_assets=args.exclude,
        logger=logger,
        default_sizes=args.default_sizes,
    )

    if args.mode == "json":
        report_path = bundle_dir / args.report
        return 0 if generate_json_report(bundle_stats, report_path, bundle_dir, options) else 1

    settings = ServerSettings(
        host=args.host,
        port=args.port,
        bundle_dir=bundle_dir,
        report_title=args.title,
        default_sizes=args.default_sizes,
        log_level=args.log_level,
    )
    return 0 if run_server(bundle_stats, settings, options) else 1


if __name__ == "__main__":
    sys.exit(main())
