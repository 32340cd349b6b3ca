"""Per-tag orchestration: resolve -> minify/cache -> rewrite URL -> render tag."""

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from .exceptions import ArtifactIOError, MinifyError, SourceNotFound
from .extractors import AssetReference
from .models import AssetType, CdnCategory
from .options import MinifyOptions
from .resolver import PathResolver
from .rewriter import UrlRewriter
from .storage import ArtifactPaths, ArtifactStore

logger = logging.getLogger(__name__)

ASYNC_CSS_ONLOAD = "this.onload=null;this.rel='stylesheet'"


@dataclass
class RenderPass:
    """Handles already rewritten during a single page render.

    Create one per request; it must never be shared across renders.
    """

    processed: set[tuple[str, str]] = field(default_factory=set)

    def seen(self, asset_type: str, handle: str) -> bool:
        return (str(asset_type), handle) in self.processed

    def mark(self, asset_type: str, handle: str) -> None:
        self.processed.add((str(asset_type), handle))


class AssetPipeline:
    """Turn a discovered asset tag into a tag pointing at its minified artifact.

    Any failure leaves the original tag untouched: minification is never
    required for the page to render correctly.
    """

    def __init__(
        self,
        options: MinifyOptions,
        store: ArtifactStore,
        resolver: PathResolver,
        rewriter: UrlRewriter,
        minifiers: Mapping[str, Callable[[str], str]],
        cache_url: str,
        deferred_markers: Iterable[str] = (),
    ) -> None:
        self.options = options
        self.store = store
        self.resolver = resolver
        self.rewriter = rewriter
        self.minifiers = {str(key): value for key, value in minifiers.items()}
        self.cache_url = cache_url.rstrip("/") + "/"
        self.deferred_markers = tuple(deferred_markers)

    def process(self, reference: AssetReference, render_pass: RenderPass) -> str:
        asset_type = str(reference.asset_type)
        if self.should_skip(reference, render_pass):
            return reference.tag

        render_pass.mark(asset_type, reference.handle)

        source_path = self.resolver.resolve(reference.url)
        if source_path is None:
            return reference.tag

        post_process = None
        if asset_type == AssetType.CSS:
            post_process = partial(
                self.rewriter.rewrite_css_urls, source_url=reference.url
            )

        try:
            paths = self.store.get_or_create(
                asset_type,
                reference.handle,
                source_path,
                self.minifiers[asset_type],
                post_process=post_process,
                gzip_enabled=self.options.enable_gzip,
            )
        except SourceNotFound:
            return reference.tag
        except MinifyError as e:
            self._log_failure(reference, e)
            return reference.tag
        except ArtifactIOError as e:
            self._log_failure(reference, e)
            return reference.tag

        artifact_url = self.rewriter.apply_cdn(
            self.cache_url + paths.filename, CdnCategory(asset_type)
        )

        if asset_type == AssetType.CSS and self.options.async_css:
            tag = render_async_css(artifact_url, reference.media)
        else:
            tag = substitute_url(reference.tag, reference.url, artifact_url)

        if self.options.enable_logging:
            self._log_reduction(reference, source_path, paths)

        return tag

    def should_skip(self, reference: AssetReference, render_pass: RenderPass) -> bool:
        asset_type = str(reference.asset_type)
        if not self.options.minify_enabled(asset_type):
            return True
        if self.options.is_excluded(asset_type, reference.handle):
            return True
        if render_pass.seen(asset_type, reference.handle):
            return True
        if f".min.{asset_type}" in reference.url:
            return True
        if any(marker in reference.tag for marker in self.deferred_markers):
            return True
        return not self.is_same_origin(reference.url)

    def is_same_origin(self, url: str) -> bool:
        if url.startswith("/"):
            return not url.startswith("//")
        site_url = self.rewriter.site_url
        if not site_url:
            return False
        return url == site_url or url.startswith(f"{site_url}/")

    def _log_failure(self, reference: AssetReference, error: Exception) -> None:
        if self.options.enable_logging:
            logger.warning(
                "%s minify error for %s: %s",
                str(reference.asset_type).upper(),
                reference.handle,
                error,
            )

    def _log_reduction(
        self, reference: AssetReference, source_path: Path, paths: ArtifactPaths
    ) -> None:
        try:
            source_size = source_path.stat().st_size
            minified_size = paths.minified_path.stat().st_size
        except OSError:
            return
        reduction = (1 - minified_size / source_size) * 100 if source_size else 0.0
        logger.info(
            "%s minified: %s - Size reduction: %.1f%%",
            str(reference.asset_type).upper(),
            reference.handle,
            reduction,
        )


def escape_attr(value: str) -> str:
    """Escape a string for safe use in an HTML attribute."""
    return (
        value.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def render_async_css(url: str, media: str) -> str:
    """Preload link that becomes a stylesheet on load, plus a noscript fallback."""
    href = escape_attr(url)
    media_attr = f' media="{escape_attr(media)}"' if media and media != "all" else ""
    return (
        f'<link rel="preload" href="{href}" as="style"{media_attr}'
        f' onload="{ASYNC_CSS_ONLOAD}">'
        f'<noscript><link rel="stylesheet" href="{href}"{media_attr}></noscript>'
    )


def substitute_url(tag: str, old_url: str, new_url: str) -> str:
    """Replace ``old_url`` in the raw tag text, also in its HTML-escaped form."""
    if old_url in tag:
        return tag.replace(old_url, new_url)
    escaped = html.escape(old_url, quote=False)
    if escaped in tag:
        return tag.replace(escaped, escape_attr(new_url))
    return tag
