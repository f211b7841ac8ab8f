"""
Asset ↔ module matching — pure functions only.

A module belongs to an asset when they share at least one chunk id.
"""
from __future__ import annotations

from typing import Optional

from bundle_analyzer.analytics.normalize import strip_query


def get_bundle_modules(bundle_stats: dict) -> list[dict]:
    """
    Deduplicated module pool of one stats object.

    Chunk modules come first, then top-level `modules`; the first module
    seen for an id wins and the order is otherwise preserved.
    """
    pool: list[dict] = []
    for chunk in bundle_stats.get("chunks") or []:
        pool.extend(chunk.get("modules") or [])
    pool.extend(bundle_stats.get("modules") or [])

    seen = set()
    modules = []
    for module in pool:
        if not module:
            continue
        module_id = module.get("id")
        if module_id in seen:
            continue
        seen.add(module_id)
        modules.append(module)
    return modules


def _asset_names_by_chunk(child: dict) -> set[str]:
    names = set()
    for value in (child.get("assetsByChunkName") or {}).values():
        for name in value if isinstance(value, list) else [value]:
            if name:
                names.add(strip_query(name))
    return names


def get_child_asset_bundles(bundle_stats: dict, asset_name: str) -> Optional[dict]:
    """Find the child build whose assetsByChunkName lists `asset_name`."""
    candidates = list(bundle_stats.get("children") or [])
    candidates += bundle_stats.get("_siblingChildren") or []
    for child in candidates:
        if asset_name in _asset_names_by_chunk(child):
            return child
    return None


def asset_has_module(stat_asset: dict, stat_module: dict) -> bool:
    asset_chunks = stat_asset.get("chunks") or []
    return any(chunk in asset_chunks for chunk in stat_module.get("chunks") or [])


def match_asset_modules(bundle_stats: dict, stat_asset: dict) -> list[dict]:
    """
    Modules belonging to one normalized asset, in module-pool order.

    Child assets are matched against their own child build; an asset whose
    child build can't be found gets no modules.
    """
    if stat_asset.get("isChild"):
        source = get_child_asset_bundles(bundle_stats, stat_asset["name"])
    else:
        source = bundle_stats
    if source is None:
        return []

    return [m for m in get_bundle_modules(source) if asset_has_module(stat_asset, m)]
