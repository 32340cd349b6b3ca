"""Configuration and settings for wagtail-asset-minifier."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from django.conf import settings

CACHE_NAMESPACE = "asset-minifier"

DEFAULTS: dict[str, Any] = {
    # Public origin of the site, e.g. "https://example.com"
    "SITE_URL": None,
    # Artifact cache location (defaults derive from MEDIA_ROOT / MEDIA_URL)
    "CACHE_DIR": None,
    "CACHE_URL": None,
    # Ordered roots searched when mapping a public URL to a local file
    "SOURCE_ROOTS": None,
    # Minifier settings
    "CSS_MINIFIER": "wagtail_asset_minifier.minifiers.css.CssMinifier",
    "JS_MINIFIER": "wagtail_asset_minifier.minifiers.js.JsMinifier",
    "TERSER_PATH": None,
    "TERSER_OPTIONS": ["-c", "-m"],
    # Tags carrying one of these markers belong to a deferred loader
    "DEFERRED_MARKERS": [
        'data-macp-delayed="true"',
        'type="rocketlazyloadscript"',
    ],
    # Middleware
    "SKIP_PATH_PREFIXES": ["/admin/", "/django-admin/"],
    "DISABLE": False,
    # Runtime options snapshot
    "OPTIONS_CACHE_TIMEOUT": 3600,
}


_UNSET = object()


def get_setting(key: str, default: Any = _UNSET) -> Any:
    """Get a setting from WAGTAIL_ASSET_MINIFIER dict or return default."""
    user_settings: dict[str, Any] = getattr(settings, "WAGTAIL_ASSET_MINIFIER", {})
    fallback = DEFAULTS.get(key) if default is _UNSET else default
    return user_settings.get(key, fallback)


def get_site_url() -> str:
    """Return the site origin without a trailing slash ("" when unknown)."""
    site_url: str | None = get_setting("SITE_URL")
    if not site_url:
        site_url = getattr(settings, "WAGTAILADMIN_BASE_URL", None) or ""
    return site_url.rstrip("/")


def get_cache_dir() -> Path:
    """Directory holding minified artifacts."""
    configured: str | None = get_setting("CACHE_DIR")
    if configured:
        return Path(configured)
    media_root: str | None = getattr(settings, "MEDIA_ROOT", None)
    if not media_root:
        raise ValueError("MEDIA_ROOT or CACHE_DIR must be configured")
    return Path(media_root) / "cache" / CACHE_NAMESPACE


def get_cache_url() -> str:
    """Public base URL of the artifact cache, always ending with a slash.

    Root-relative values are prefixed with the site origin so CDN
    substitution can apply to them.
    """
    configured: str | None = get_setting("CACHE_URL")
    if not configured:
        media_url: str = getattr(settings, "MEDIA_URL", None) or "/media/"
        configured = f"{media_url.rstrip('/')}/cache/{CACHE_NAMESPACE}/"
    if configured.startswith("/") and not configured.startswith("//"):
        configured = f"{get_site_url()}{configured}"
    return configured.rstrip("/") + "/"


def get_source_roots() -> list[tuple[str, Path]]:
    """Return the ordered ``(url_prefix, directory)`` roots for path resolution.

    Entries of ``SOURCE_ROOTS`` may be plain directories (empty prefix) or
    ``(url_prefix, directory)`` pairs.
    """
    configured = get_setting("SOURCE_ROOTS")
    if configured is None:
        configured = [
            getattr(settings, "BASE_DIR", None),
            (getattr(settings, "MEDIA_URL", None), getattr(settings, "MEDIA_ROOT", None)),
            (getattr(settings, "STATIC_URL", None), getattr(settings, "STATIC_ROOT", None)),
        ]

    roots: list[tuple[str, Path]] = []
    for entry in configured:
        if isinstance(entry, (tuple, list)):
            prefix, directory = entry
        else:
            prefix, directory = "", entry
        if not directory:
            continue
        roots.append((prefix or "", Path(directory)))
    return roots
