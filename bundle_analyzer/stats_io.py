"""
Disk helpers shared by the CLI, the server and the source attribution step.
No analysis logic lives here — only I/O primitives.
"""
from __future__ import annotations

import gzip
import json
import zlib
from pathlib import Path
from typing import NamedTuple, Union

from bundle_analyzer.errors import BundleParseError, StatsFileError

PathLike = Union[str, Path]


class BundleInfo(NamedTuple):
    """Full asset source plus the source slice of every module found in it."""
    src:     str
    modules: dict


def read_stats_from_file(filename: PathLike) -> dict:
    path = Path(filename)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as err:
        raise StatsFileError(f"Stats file not found: {path}") from err
    except json.JSONDecodeError as err:
        raise StatsFileError(f"Stats file {path} is not valid JSON: {err}") from err


def read_bundle(asset_path: PathLike) -> BundleInfo:
    """
    Default bundle reader.

    Returns the asset text without module boundaries, so asset-level parsed
    and gzip sizes are real while per-module sizes fall back to stats.
    Plug a module-boundary parser in through AnalyzerOptions.parse_bundle
    to get per-module slices.

    ".gz" assets are decompressed first. A missing file raises
    FileNotFoundError; unreadable content raises BundleParseError.
    """
    path = Path(asset_path)
    raw = path.read_bytes()
    if path.suffix.lower() == ".gz":
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as err:
            raise BundleParseError(f"{path.name} is not valid gzip: {err}") from err
    try:
        src = raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise BundleParseError(f"{path.name} is not UTF-8 text: {err}") from err
    return BundleInfo(src=src, modules={})


def write_json_report(report_filename: PathLike, chart_data: list[dict]) -> Path:
    path = Path(report_filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(chart_data), encoding="utf-8")
    return path
