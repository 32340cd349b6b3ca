"""Middleware that points asset tags at minified artifacts and applies the CDN."""

from __future__ import annotations

import logging
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from .conf import get_setting
from .extractors import extract_references
from .options import MinifyOptions, get_options
from .pipeline import RenderPass
from .utils import get_content_rewriter, get_pipeline

logger = logging.getLogger(__name__)


class AssetMinifierMiddleware:
    """Rewrite stylesheet/script tags and image URLs in HTML responses.

    Every ``<link rel="stylesheet">`` and ``<script src>`` tag in the page is
    handed to the asset pipeline once, with a render pass scoped to this
    request. Image URLs are then substituted with the CDN host when enabled.
    Non-HTML, streaming, and admin responses pass through untouched.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        response = self.get_response(request)

        if get_setting("DISABLE"):
            return response

        content_type = response.get("Content-Type", "")
        if "text/html" not in content_type:
            return response

        if getattr(response, "streaming", False) or _is_skipped_path(request):
            return response

        options = get_options()
        charset = response.charset or "utf-8"
        content = response.content.decode(charset)
        processed = process_html(content, options)
        if processed == content:
            return response

        response.content = processed.encode(charset)
        response["Content-Length"] = len(response.content)
        return response


def _is_skipped_path(request: HttpRequest) -> bool:
    """Admin pages are never rewritten."""
    path = request.path
    return any(path.startswith(prefix) for prefix in get_setting("SKIP_PATH_PREFIXES"))


def process_html(html: str, options: MinifyOptions) -> str:
    """Rewrite asset tags and content URLs of one rendered page."""
    if options.minify_css or options.minify_js:
        pipeline = get_pipeline(options)
        render_pass = RenderPass()
        replacements = []
        for reference in extract_references(html):
            if not reference.tag or reference.position is None:
                continue
            new_tag = pipeline.process(reference, render_pass)
            if new_tag != reference.tag:
                replacements.append((reference.position, reference.tag, new_tag))
        html = splice_tags(html, replacements)
        logger.debug("Rewrote %d asset tag(s)", len(replacements))

    return get_content_rewriter(options).rewrite_content(html)


def splice_tags(html: str, replacements: list[tuple[int, str, str]]) -> str:
    """Swap each ``(position, old_tag, new_tag)`` at its parsed offset.

    Text that merely repeats a tag, such as a commented-out copy or a string
    inside an inline script, is never touched.
    """
    for position, old_tag, new_tag in sorted(replacements, reverse=True):
        if not html.startswith(old_tag, position):
            logger.warning("Asset tag moved before rewrite at offset %d", position)
            continue
        html = html[:position] + new_tag + html[position + len(old_tag):]
    return html
