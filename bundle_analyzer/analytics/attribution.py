"""
Real source attribution — maps bundle assets on disk to module sources.

The actual parsing is delegated to `parse_bundle(path) -> BundleInfo`;
this step only decides what to do when it fails.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

NO_BUNDLES_PARSED = (
    "No bundles were parsed. Analyzer will show only original module sizes from stats file."
)


def attribute_sources(
    assets: list[dict],
    bundle_dir: Optional[str | Path],
    parse_bundle: Callable,
    logger,
) -> tuple[Optional[dict], Optional[dict]]:
    """
    Parse every retained asset found in `bundle_dir`.

    Returns (bundle_sources, parsed_modules):
      bundle_sources — asset name -> full asset source
      parsed_modules — module id -> module source, merged across assets
    Both are None when bundle_dir is None or when no asset could be parsed.
    """
    if not bundle_dir:
        return None, None

    bundle_sources: dict[str, str] = {}
    parsed_modules: dict = {}

    for stat_asset in assets:
        asset_file = Path(bundle_dir) / stat_asset["name"]
        try:
            bundle_info = parse_bundle(asset_file)
        except FileNotFoundError:
            logger.warning(f'Error parsing bundle asset "{asset_file}": no such file')
            continue
        except Exception as err:
            logger.warning(f'Error parsing bundle asset "{asset_file}": {err}')
            continue

        bundle_sources[stat_asset["name"]] = bundle_info.src
        parsed_modules.update(bundle_info.modules)

    if not bundle_sources:
        logger.warning(NO_BUNDLES_PARSED)
        return None, None

    return bundle_sources, parsed_modules
