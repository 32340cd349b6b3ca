"""Wiring for wagtail-asset-minifier.

Pipeline: Resolve -> Key -> Minify/Store -> Rewrite -> Render
"""

from __future__ import annotations

import logging
from importlib import import_module
from pathlib import Path

from .conf import get_cache_dir, get_cache_url, get_setting
from .content import ContentUrlRewriter
from .minifiers.base import BaseMinifier
from .models import AssetType
from .options import MinifyOptions, get_options
from .pipeline import AssetPipeline
from .resolver import PathResolver
from .rewriter import UrlRewriter
from .storage import ArtifactStore

logger = logging.getLogger(__name__)

_stores: dict[Path, ArtifactStore] = {}


def get_artifact_store() -> ArtifactStore:
    """Return the process-wide store for the configured cache directory."""
    cache_dir = get_cache_dir()
    store = _stores.get(cache_dir)
    if store is None:
        store = _stores[cache_dir] = ArtifactStore(cache_dir)
    return store


def get_minifier(asset_type: str) -> BaseMinifier:
    """Import and instantiate the configured minifier for an asset type."""
    key = "CSS_MINIFIER" if asset_type == AssetType.CSS else "JS_MINIFIER"
    cls = import_class(get_setting(key))
    return cls()  # type: ignore[no-any-return]


def get_pipeline(options: MinifyOptions | None = None) -> AssetPipeline:
    """Build an AssetPipeline from settings and the options snapshot."""
    if options is None:
        options = get_options()
    return AssetPipeline(
        options=options,
        store=get_artifact_store(),
        resolver=PathResolver.from_settings(),
        rewriter=UrlRewriter(options.cdn),
        minifiers={
            AssetType.CSS: get_minifier(AssetType.CSS),
            AssetType.JS: get_minifier(AssetType.JS),
        },
        cache_url=get_cache_url(),
        deferred_markers=get_setting("DEFERRED_MARKERS"),
    )


def get_content_rewriter(options: MinifyOptions | None = None) -> ContentUrlRewriter:
    if options is None:
        options = get_options()
    return ContentUrlRewriter(UrlRewriter(options.cdn))


def clear_cache() -> int:
    """Delete every cached artifact. Returns the number of files removed."""
    deleted = get_artifact_store().purge_all()
    logger.info("Cleared asset cache: %d file(s) removed", deleted)
    return deleted


def sweep_cache(max_age_seconds: int | None = None) -> int:
    """Delete artifacts older than ``max_age_seconds`` (default: cache_lifetime)."""
    options = get_options()
    if max_age_seconds is None:
        max_age_seconds = options.cache_lifetime
    deleted = get_artifact_store().sweep(max_age_seconds)
    if options.enable_logging and deleted > 0:
        logger.info("Cleaned up %d cached file(s)", deleted)
    return deleted


def import_class(dotted_path: str) -> type:
    """Import a class from a dotted path string."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = import_module(module_path)
    return getattr(module, class_name)  # type: ignore[no-any-return]
