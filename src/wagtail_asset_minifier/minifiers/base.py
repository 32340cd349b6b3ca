"""Base class for minifiers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseMinifier(ABC):
    """Abstract base class for minifiers.

    A minifier is a pure function from source text to minified text. Any
    exception it raises is reported as a ``MinifyError`` by the artifact
    store and the page keeps the original asset.
    """

    @abstractmethod
    def minify(self, source: str) -> str:
        """Minify source text.

        Args:
            source: Full text of the CSS or JS source file.

        Returns:
            Minified text.
        """
        ...

    def __call__(self, source: str) -> str:
        return self.minify(source)
