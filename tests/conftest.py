"""
Shared fixtures and helpers for the bundle analyzer tests.

Stats objects are synthetic: just the fields the analyzer reads, shaped
like webpack's `stats.toJson()` output. No build tool required.
"""
import pytest

from bundle_analyzer.config import AnalyzerOptions


def make_module(module_id, name, size, chunks=(0,), modules=None, **extra):
    module = {"id": module_id, "name": name, "size": size, "chunks": list(chunks), **extra}
    if modules is not None:
        module["modules"] = modules
    return module


def make_asset(name, size=100, chunks=(0,)):
    return {"name": name, "size": size, "chunks": list(chunks)}


def make_stats(assets, modules=(), chunks=None, **extra):
    """Top-level stats; modules are attached to a single chunk 0 by default."""
    if chunks is None:
        chunks = [{"id": 0, "modules": list(modules)}]
    return {"assets": list(assets), "chunks": chunks, **extra}


class RecordingLogger:
    """Stand-in for the injectable logger: keeps (level, message) pairs."""

    def __init__(self):
        self.records = []

    def _log(self, level, msg):
        self.records.append((level, msg))

    def debug(self, msg):
        self._log("debug", msg)

    def info(self, msg):
        self._log("info", msg)

    def warning(self, msg):
        self._log("warning", msg)

    def error(self, msg):
        self._log("error", msg)

    def messages(self, level):
        return [m for lvl, m in self.records if lvl == level]


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def options(logger):
    return AnalyzerOptions(logger=logger)


@pytest.fixture
def simple_stats():
    """bundle.js (declared 141) built from a.js (50) and b.js (91)."""
    return make_stats(
        [make_asset("bundle.js", size=141)],
        [make_module(1, "./a.js", 50), make_module(2, "./b.js", 91)],
    )
