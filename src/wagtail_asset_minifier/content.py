"""CDN substitution for image URLs in rendered markup."""

from __future__ import annotations

import re
from typing import Any

from .models import CdnCategory
from .rewriter import UrlRewriter

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp", "avif", "svg", "bmp", "tiff", "ico")


class ContentUrlRewriter:
    """Rewrite site-origin image URLs in markup to the CDN host."""

    def __init__(self, rewriter: UrlRewriter) -> None:
        self.rewriter = rewriter
        self._pattern: re.Pattern[str] | None = None

    @property
    def enabled(self) -> bool:
        return self.rewriter.cdn.applies(CdnCategory.IMAGE)

    @property
    def pattern(self) -> re.Pattern[str]:
        if self._pattern is None:
            origin = re.escape(self.rewriter.cdn.origin_host)
            extensions = "|".join(IMAGE_EXTENSIONS)
            self._pattern = re.compile(
                rf"{origin}/[^\s\"'<>()]*?\.(?:{extensions})(?![a-z0-9])",
                re.IGNORECASE,
            )
        return self._pattern

    def rewrite_content(self, markup: str) -> str:
        if not self.enabled:
            return markup
        return self.pattern.sub(self._replace, markup)

    def rewrite_srcset(self, sources: dict[Any, dict[str, Any]]) -> dict[Any, dict[str, Any]]:
        """Rewrite the ``url`` of every srcset entry in place.

        ``sources`` maps a descriptor (e.g. a width) to a dict holding at
        least ``url``.

        ``srcset`` attributes in rendered markup are already handled by
        ``rewrite_content`` in the middleware. This entry point is for host
        code that builds srcset data itself, such as a template tag or a
        rendition URL helper, and must call it directly.
        """
        if not self.enabled:
            return sources
        for source in sources.values():
            url = source.get("url")
            if url:
                source["url"] = self.rewriter.apply_cdn(url, CdnCategory.IMAGE)
        return sources

    def _replace(self, match: re.Match[str]) -> str:
        return self.rewriter.apply_cdn(match.group(0), CdnCategory.IMAGE)
