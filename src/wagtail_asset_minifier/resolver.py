"""Map public asset URLs to local source files."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import unquote, urlsplit

from .conf import get_source_roots


class PathResolver:
    """Search an ordered list of roots for the file behind a public URL.

    Each root is a ``(url_prefix, directory)`` pair. An empty prefix means
    the URL path is appended to the directory as-is; otherwise only paths
    under the prefix are considered, with the prefix removed. The first
    readable file wins.
    """

    def __init__(self, roots: Iterable[tuple[str, Path]]) -> None:
        self.roots = [(prefix.strip("/"), Path(directory)) for prefix, directory in roots]

    @classmethod
    def from_settings(cls) -> PathResolver:
        return cls(get_source_roots())

    def resolve(self, url: str) -> Path | None:
        path = unquote(urlsplit(url).path).lstrip("/")
        if not path:
            return None

        for prefix, directory in self.roots:
            relative = self._strip_prefix(path, prefix)
            if relative is None:
                continue
            candidate = directory / relative
            if candidate.is_file() and os.access(candidate, os.R_OK):
                return candidate
        return None

    @staticmethod
    def _strip_prefix(path: str, prefix: str) -> str | None:
        if not prefix:
            return path
        if path.startswith(f"{prefix}/"):
            return path[len(prefix) + 1 :]
        return None
