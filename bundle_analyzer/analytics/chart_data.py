"""
Chart data projection — the full stats → treemap pipeline.

get_viewer_data() runs normalize → attribute → match → tree → project and
lets errors propagate; get_chart_data() is the wrapper the server and CLI
use, which logs failures and returns None instead.
"""
from __future__ import annotations

import traceback
from pathlib import Path
from typing import Optional

from bundle_analyzer.analytics.attribution import attribute_sources
from bundle_analyzer.analytics.matching import match_asset_modules
from bundle_analyzer.analytics.normalize import normalize_stats
from bundle_analyzer.analytics.tree import CompositionTree, Node, NodeKind, byte_length
from bundle_analyzer.config import AnalyzerOptions


def node_chart_data(node: Node) -> dict:
    """
    Chart record of one tree node, recursively.

    folder        — label, path, statSize, parsedSize, gzipSize, groups
    module        — id, label, path, statSize, parsedSize, gzipSize
    concatenated  — module fields + concatenated, groups
    """
    if node.kind is NodeKind.FOLDER:
        return {
            "label":      node.name,
            "path":       node.path,
            "statSize":   node.stat_size,
            "parsedSize": node.parsed_size,
            "gzipSize":   node.gzip_size,
            "groups":     [node_chart_data(c) for c in node.children.values()],
        }

    data = {
        "id":         node.data.get("id"),
        "label":      node.name,
        "path":       node.path,
        "statSize":   node.stat_size,
        "parsedSize": node.parsed_size,
        "gzipSize":   node.gzip_size,
    }
    if node.kind is NodeKind.CONCATENATED:
        data["concatenated"] = True
        data["groups"] = [node_chart_data(c) for c in node.children.values()]
    return data


def project_asset(
    label: str,
    stat_asset: dict,
    tree: CompositionTree,
    asset_src: Optional[str],
    options: AnalyzerOptions,
) -> dict:
    """
    Top-level chart record of one asset.

    Module stat sizes are pre-minification, so the asset's own declared size
    is only used when no module matched (tree size 0).
    """
    parsed_size = gzip = None
    if asset_src is not None:
        parsed_size = byte_length(asset_src)
        gzip        = options.compressed_size(asset_src)

    return {
        "label":      label,
        "isAsset":    True,
        "statSize":   tree.stat_size or stat_asset.get("size", 0),
        "parsedSize": parsed_size,
        "gzipSize":   gzip,
        "groups":     [node_chart_data(c) for c in tree.children.values()],
    }


def get_viewer_data(
    bundle_stats: dict,
    bundle_dir: Optional[str | Path] = None,
    options: Optional[AnalyzerOptions] = None,
) -> list[dict]:
    """Chart data for every retained asset, in retained-asset order."""
    options = options or AnalyzerOptions()
    stats = normalize_stats(bundle_stats, options.exclude_assets)

    bundle_sources, parsed_modules = attribute_sources(
        stats["assets"], bundle_dir, options.parse_bundle, options.logger,
    )

    # keyed by name: a repeated asset name keeps its first position
    assets: dict[str, tuple[dict, CompositionTree]] = {}
    for stat_asset in stats["assets"]:
        modules = match_asset_modules(stats, stat_asset)
        tree = CompositionTree.from_modules(
            modules, parsed_modules, compressed_size=options.compressed_size,
        )
        assets[stat_asset["name"]] = (stat_asset, tree)

    chart_data = []
    for name, (stat_asset, tree) in assets.items():
        asset_src = bundle_sources.get(name) if bundle_sources else None
        chart_data.append(project_asset(name, stat_asset, tree, asset_src, options))
    return chart_data


def get_chart_data(
    bundle_stats: dict,
    bundle_dir: Optional[str | Path] = None,
    options: Optional[AnalyzerOptions] = None,
) -> Optional[list[dict]]:
    """get_viewer_data() that never raises: failures and empty results give None."""
    options = options or AnalyzerOptions()
    logger = options.logger

    try:
        chart_data = get_viewer_data(bundle_stats, bundle_dir, options)
    except Exception as err:
        logger.error(f"Couldn't analyze webpack bundle:\n{err}")
        logger.debug(traceback.format_exc())
        return None

    if not chart_data:
        logger.error("Couldn't find any javascript bundles in provided stats file")
        return None

    return chart_data
