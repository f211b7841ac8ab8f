"""
Option and settings models.

AnalyzerOptions travels with every analysis run; ServerSettings only
matters to the live server and the CLI.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from bundle_analyzer.analytics.tree import gzip_size
from bundle_analyzer.log import LOGGER_NAME
from bundle_analyzer.stats_io import read_bundle

SizeKind = Literal["stat", "parsed", "gzip"]

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8888
DEFAULT_REPORT_FILENAME = "report.json"


class AnalyzerOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    # str (regex source) | compiled regex | callable | list of those
    exclude_assets:  Any                        = None
    logger:          Any                        = Field(default_factory=lambda: logging.getLogger(LOGGER_NAME))
    default_sizes:   SizeKind                   = "parsed"
    compressed_size: Callable[[str], int]       = gzip_size
    parse_bundle:    Callable[[Path], Any]      = read_bundle


class ServerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host:          str                = DEFAULT_HOST
    port:          int                = Field(DEFAULT_PORT, ge=0, le=65535)
    bundle_dir:    Optional[Path]     = None
    report_title:  Optional[str]      = None
    default_sizes: SizeKind           = "parsed"
    log_level:     str                = "info"
