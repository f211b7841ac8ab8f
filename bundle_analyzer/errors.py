"""
Exception hierarchy shared by the analyzer, the I/O helpers and the CLI.
"""


class AnalyzerError(Exception):
    """Base class for every error raised by bundle_analyzer."""


class BundleParseError(AnalyzerError):
    """A bundle asset could not be split into module sources."""


class StatsFileError(AnalyzerError):
    """The stats file is missing or is not valid JSON."""
