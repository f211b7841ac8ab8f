"""
Stats normalization — pure functions only.

Bundler stats come in three shapes:
  (a) assets/chunks/modules at the top level
  (b) an empty top level whose content lives in `children` sub-builds
  (c) top-level assets plus extra `children` sub-builds
normalize_stats() turns all of them into one stats dict whose `assets`
list holds only the JS bundles worth reporting.
"""
from __future__ import annotations

import re
from typing import Any, Callable

FILENAME_QUERY_REGEXP = re.compile(r"\?.*$")
FILENAME_EXTENSIONS   = re.compile(r"\.(js|mjs|gz|br)$", re.IGNORECASE)


def strip_query(filename: str) -> str:
    """Drop a trailing "?query" (webpack allows "[name].js?[hash]")."""
    return FILENAME_QUERY_REGEXP.sub("", filename)


def _compile_pattern(pattern: Any) -> Callable[[str], bool]:
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    if isinstance(pattern, re.Pattern):
        return lambda filename: pattern.search(filename) is not None
    if callable(pattern):
        return pattern
    raise TypeError(
        f"Pattern should be either string, RegExp or a function, but {pattern!r} got."
    )


def create_assets_filter(exclude_patterns: Any) -> Callable[[str], bool]:
    """
    Build the "is this asset included?" predicate.

    exclude_patterns — None, a string (regex source), a compiled regex, a
                       callable(filename) -> bool, or a list of those.
    An asset is dropped as soon as any matcher hits; callables only exclude
    when they return exactly True.
    """
    if exclude_patterns is None:
        patterns = []
    elif isinstance(exclude_patterns, (list, tuple)):
        patterns = [p for p in exclude_patterns if p]
    else:
        patterns = [exclude_patterns] if exclude_patterns else []

    exclude_fns = [_compile_pattern(p) for p in patterns]
    if not exclude_fns:
        return lambda filename: True

    return lambda filename: all(fn(filename) is not True for fn in exclude_fns)


def _flag_child_assets(child: dict) -> list[dict]:
    return [{**asset, "isChild": True} for asset in child.get("assets") or []]


def normalize_stats(bundle_stats: dict, exclude_assets: Any = None) -> dict:
    """
    Return a normalized copy of `bundle_stats`; the input is left untouched.

    Case (b): the first child becomes the working stats object and the
    assets of the remaining children are appended flagged isChild.
    Case (c): every child asset is appended flagged isChild.
    Retained assets: JS-like extension, non-empty chunks, not excluded.

    Returned shape: the working stats object's own keys, with
      assets            — retained assets, names stripped of "?query"
      _siblingChildren  — case (b) only: the children after the first,
                          which get_child_asset_bundles() searches next to
                          the working object's own `children`
    """
    is_included = create_assets_filter(exclude_assets)
    children = bundle_stats.get("children") or []

    if not bundle_stats.get("assets") and children:
        stats = dict(children[0])
        assets = list(stats.get("assets") or [])
        for child in children[1:]:
            assets.extend(_flag_child_assets(child))
        stats["_siblingChildren"] = children[1:]
    else:
        stats = dict(bundle_stats)
        assets = list(stats.get("assets") or [])
        for child in children:
            assets.extend(_flag_child_assets(child))

    retained = []
    for asset in assets:
        asset = {**asset, "name": strip_query(asset.get("name") or "")}
        if (
            FILENAME_EXTENSIONS.search(asset["name"])
            and asset.get("chunks")
            and is_included(asset["name"])
        ):
            retained.append(asset)

    stats["assets"] = retained
    return stats
