"""
Bundle Analyzer — treemap size reports from bundler stats JSON.
"""
__version__ = "0.1.0"
