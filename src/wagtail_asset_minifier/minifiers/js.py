"""JavaScript minifier backed by rjsmin."""

from __future__ import annotations

import rjsmin  # type: ignore[import-untyped]

from .base import BaseMinifier


class JsMinifier(BaseMinifier):
    """Minify scripts with ``rjsmin.jsmin``."""

    keep_bang_comments: bool = False

    def minify(self, source: str) -> str:
        return rjsmin.jsmin(  # type: ignore[no-any-return]
            source, keep_bang_comments=self.keep_bang_comments
        )
