"""CSS minifier backed by rcssmin."""

from __future__ import annotations

import rcssmin  # type: ignore[import-untyped]

from .base import BaseMinifier


class CssMinifier(BaseMinifier):
    """Minify stylesheets with ``rcssmin.cssmin``."""

    keep_bang_comments: bool = False

    def minify(self, source: str) -> str:
        return rcssmin.cssmin(  # type: ignore[no-any-return]
            source, keep_bang_comments=self.keep_bang_comments
        )
