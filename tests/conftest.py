"""Pytest fixtures for wagtail-asset-minifier tests."""

from __future__ import annotations

from unittest import mock

import pytest

from wagtail_asset_minifier.models import AssetType
from wagtail_asset_minifier.options import MinifyOptions
from wagtail_asset_minifier.pipeline import AssetPipeline
from wagtail_asset_minifier.resolver import PathResolver
from wagtail_asset_minifier.rewriter import UrlRewriter
from wagtail_asset_minifier.storage import ArtifactStore

SITE_URL = "https://site.example"
CDN_URL = "https://cdn.example"
CACHE_URL = f"{SITE_URL}/wp-content/cache/asset-minifier/"

STYLE_CSS = (
    "/* Theme stylesheet */\n"
    ".hero {\n"
    "    background: url(img/x.png) no-repeat;\n"
    "    color: #333333;\n"
    "}\n"
    "\n"
    ".footer {\n"
    "    margin: 0 auto;\n"
    "    padding: 10px 20px 10px 20px;\n"
    "}\n"
)

APP_JS = "// application\nfunction hello(name) {\n    return 'hi ' + name;\n}\n"


def upper_minify(source: str) -> str:
    """Stand-in minifier with an obvious, deterministic output."""
    return source.strip().upper()


@pytest.fixture
def site_root(tmp_path):
    """A document root holding a theme stylesheet and an app script."""
    root = tmp_path / "site"
    theme = root / "wp-content" / "themes" / "t"
    theme.mkdir(parents=True)
    (theme / "style.css").write_text(STYLE_CSS, encoding="utf-8")
    js_dir = root / "wp-content" / "plugins" / "app"
    js_dir.mkdir(parents=True)
    (js_dir / "app.js").write_text(APP_JS, encoding="utf-8")
    return root


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def store(cache_dir):
    return ArtifactStore(cache_dir)


@pytest.fixture
def make_options():
    """Factory for options snapshots rooted at the test site origin."""

    def _make(**raw):
        return MinifyOptions.from_mapping(raw, site_url=SITE_URL)

    return _make


@pytest.fixture
def make_pipeline(site_root, store):
    """Factory for a fully wired pipeline over ``site_root`` and ``store``."""

    def _make(options, *, minifiers=None, store_override=None, deferred_markers=None):
        if minifiers is None:
            minifiers = {AssetType.CSS: upper_minify, AssetType.JS: upper_minify}
        if deferred_markers is None:
            deferred_markers = [
                'data-macp-delayed="true"',
                'type="rocketlazyloadscript"',
            ]
        return AssetPipeline(
            options=options,
            store=store_override or store,
            resolver=PathResolver([("", site_root)]),
            rewriter=UrlRewriter(options.cdn),
            minifiers=minifiers,
            cache_url=CACHE_URL,
            deferred_markers=deferred_markers,
        )

    return _make


@pytest.fixture
def mock_store():
    """Mock artifact store."""
    return mock.Mock(spec=ArtifactStore)
