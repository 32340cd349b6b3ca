"""URL rewriting for minified CSS and CDN host substitution."""

from __future__ import annotations

import re
from urllib.parse import urljoin

from .models import CdnCategory
from .options import CdnConfig

# url(...) whose target is neither scheme-qualified nor starts with "/"
# (which also covers protocol-relative "//host" references). The lookahead
# skips leading whitespace and quotes so "url( /a.png)" is left alone.
RELATIVE_CSS_URL_RE = re.compile(
    r"""url\((?![\s'"]*(?:[a-z][a-z0-9+.-]*:|/))\s*['"]?([^'")]+)['"]?\s*\)""",
    re.IGNORECASE,
)


class UrlRewriter:
    """Absolutize relative CSS URLs and apply CDN substitution.

    All outbound asset URLs go through ``apply_cdn`` so substitution is
    uniform across tags, stylesheets, and page content.
    """

    def __init__(self, cdn: CdnConfig) -> None:
        self.cdn = cdn
        self.site_url = cdn.origin_host

    def apply_cdn(self, url: str, category: str) -> str:
        """Swap the site origin prefix of ``url`` for the CDN host.

        No-op unless CDN is enabled for ``category`` and the URL starts
        with exactly the site origin.
        """
        if not self.cdn.applies(category):
            return url
        origin = self.cdn.origin_host
        if url != origin and not url.startswith(f"{origin}/"):
            return url
        return self.cdn.cdn_host + url[len(origin) :]

    def absolutize(self, url: str) -> str:
        """Prefix root-relative URLs with the site origin."""
        if url.startswith("/") and not url.startswith("//"):
            return f"{self.site_url}{url}"
        return url

    def rewrite_css_urls(self, css: str, source_url: str) -> str:
        """Resolve relative ``url()`` references against the source's URL.

        Absolute, root-relative, protocol-relative, and scheme-qualified
        (e.g. ``data:``) references are left byte-for-byte unchanged.
        """
        base_url = self.absolutize(source_url)

        def _replace(match: re.Match[str]) -> str:
            relative_path = match.group(1).strip()
            absolute_url = urljoin(base_url, relative_path)
            absolute_url = self.apply_cdn(absolute_url, CdnCategory.CSS)
            return f"url('{absolute_url}')"

        return RELATIVE_CSS_URL_RE.sub(_replace, css)
