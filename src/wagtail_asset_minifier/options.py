"""Runtime options snapshot.

Options are persisted in ``MinifierSettings`` and read through an immutable
``MinifyOptions`` snapshot cached process-wide with Django's cache
framework. Saving the settings invalidates the snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from django.core.cache import cache
from django.db import DatabaseError

from .conf import get_setting, get_site_url
from .models import AssetType, CdnCategory, MinifierSettings

logger = logging.getLogger(__name__)

OPTIONS_CACHE_KEY = "wam:options"

DEFAULT_CACHE_LIFETIME = 2592000  # 30 days

DEFAULT_OPTIONS: dict[str, Any] = {
    "minify_css": True,
    "minify_js": True,
    "exclude_css": [],
    "exclude_js": [],
    "enable_logging": False,
    "async_css": False,
    "cache_lifetime": DEFAULT_CACHE_LIFETIME,
    "enable_gzip": True,
    "enable_cdn": False,
    "cdn_url": "",
    "cdn_css": True,
    "cdn_js": True,
    "cdn_images": True,
}

OPTION_NAMES = tuple(DEFAULT_OPTIONS)

_BOOLEAN_OPTIONS = (
    "minify_css",
    "minify_js",
    "enable_logging",
    "async_css",
    "enable_gzip",
    "enable_cdn",
    "cdn_css",
    "cdn_js",
    "cdn_images",
)

_FALSE_STRINGS = frozenset({"", "0", "false", "off", "no"})


@dataclass(frozen=True)
class CdnConfig:
    enabled: bool = False
    origin_host: str = ""
    cdn_host: str = ""
    applies_to: frozenset[str] = frozenset()

    def applies(self, category: str) -> bool:
        """Whether URLs of ``category`` are substituted at all."""
        return (
            self.enabled
            and bool(self.origin_host)
            and bool(self.cdn_host)
            and str(category) in self.applies_to
        )


@dataclass(frozen=True)
class MinifyOptions:
    minify_css: bool = True
    minify_js: bool = True
    exclude_css: tuple[str, ...] = ()
    exclude_js: tuple[str, ...] = ()
    enable_logging: bool = False
    async_css: bool = False
    cache_lifetime: int = DEFAULT_CACHE_LIFETIME
    enable_gzip: bool = True
    cdn: CdnConfig = field(default_factory=CdnConfig)

    @classmethod
    def from_mapping(
        cls, raw: Mapping[str, Any], site_url: str = ""
    ) -> MinifyOptions:
        """Build a snapshot from (possibly partial) raw options."""
        values = sanitize_options({**DEFAULT_OPTIONS, **raw})
        categories = {
            CdnCategory.CSS: values["cdn_css"],
            CdnCategory.JS: values["cdn_js"],
            CdnCategory.IMAGE: values["cdn_images"],
        }
        cdn = CdnConfig(
            enabled=values["enable_cdn"],
            origin_host=site_url.rstrip("/"),
            cdn_host=values["cdn_url"],
            applies_to=frozenset(str(c.value) for c, on in categories.items() if on),
        )
        return cls(
            minify_css=values["minify_css"],
            minify_js=values["minify_js"],
            exclude_css=tuple(values["exclude_css"]),
            exclude_js=tuple(values["exclude_js"]),
            enable_logging=values["enable_logging"],
            async_css=values["async_css"],
            cache_lifetime=values["cache_lifetime"],
            enable_gzip=values["enable_gzip"],
            cdn=cdn,
        )

    def minify_enabled(self, asset_type: str) -> bool:
        if asset_type == AssetType.CSS:
            return self.minify_css
        return self.minify_js

    def is_excluded(self, asset_type: str, handle: str) -> bool:
        excluded = self.exclude_css if asset_type == AssetType.CSS else self.exclude_js
        return handle in excluded


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def parse_handle_list(value: Any) -> list[str]:
    """Normalize an exclude list given as a comma-separated string or a list."""
    if not value:
        return []
    items: Iterable[Any] = value.split(",") if isinstance(value, str) else value
    handles = [str(item).strip() for item in items]
    return [handle for handle in handles if handle]


def sanitize_options(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce raw option values into their stored form.

    Unknown keys are dropped and missing keys take their default.
    """
    output: dict[str, Any] = {}
    for name in _BOOLEAN_OPTIONS:
        output[name] = _to_bool(raw.get(name, DEFAULT_OPTIONS[name]))

    output["exclude_css"] = parse_handle_list(raw.get("exclude_css"))
    output["exclude_js"] = parse_handle_list(raw.get("exclude_js"))
    output["cdn_url"] = str(raw.get("cdn_url") or "").strip().rstrip("/")

    try:
        lifetime = int(raw.get("cache_lifetime", DEFAULT_CACHE_LIFETIME))
    except (TypeError, ValueError):
        lifetime = DEFAULT_CACHE_LIFETIME
    output["cache_lifetime"] = lifetime if lifetime >= 0 else DEFAULT_CACHE_LIFETIME

    return output


def _load_raw_options() -> dict[str, Any]:
    try:
        stored = MinifierSettings.stored()
    except DatabaseError:
        logger.warning("Minifier settings table unavailable. Using defaults.")
        return dict(DEFAULT_OPTIONS)
    if stored is None:
        return dict(DEFAULT_OPTIONS)
    return stored.as_options()


def get_options() -> MinifyOptions:
    """Return the cached options snapshot, loading it on a miss."""
    cached = cache.get(OPTIONS_CACHE_KEY)
    if cached is not None:
        return cached  # type: ignore[no-any-return]

    options = MinifyOptions.from_mapping(_load_raw_options(), get_site_url())
    cache.set(OPTIONS_CACHE_KEY, options, get_setting("OPTIONS_CACHE_TIMEOUT"))
    return options


def invalidate_options() -> None:
    """Drop the cached snapshot so the next request reloads it."""
    cache.delete(OPTIONS_CACHE_KEY)
