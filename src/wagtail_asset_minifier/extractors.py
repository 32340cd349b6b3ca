"""Discover external stylesheet and script references in rendered HTML."""

from __future__ import annotations

from html.parser import HTMLParser
from pathlib import PurePosixPath
from typing import NamedTuple
from urllib.parse import urlsplit

from django.utils.text import slugify

from .models import AssetType


class AssetReference(NamedTuple):
    """A stylesheet or script tag discovered during one render pass."""

    handle: str
    asset_type: str
    url: str
    tag: str  # raw start tag text as it appears in the markup
    media: str = "all"
    position: int | None = None  # offset of ``tag`` in the parsed markup


class AssetTagExtractor(HTMLParser):
    """HTML parser collecting ``<link rel="stylesheet">`` and ``<script src>`` tags.

    Respects the ``data-no-minify`` attribute: tags with this attribute
    are not collected.
    """

    def __init__(self) -> None:
        super().__init__()
        self._references: list[AssetReference] = []
        self._line_starts = [0]
        self._fed_length = 0

    def feed(self, data: str) -> None:
        # getpos() reports (line, column); keep line offsets to map it back.
        self._line_starts.extend(
            self._fed_length + index + 1
            for index, char in enumerate(data)
            if char == "\n"
        )
        self._fed_length += len(data)
        super().feed(data)

    def _offset(self) -> int:
        lineno, column = self.getpos()
        return self._line_starts[lineno - 1] + column

    @property
    def references(self) -> list[AssetReference]:
        return list(self._references)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag not in ("link", "script"):
            return

        attr_dict = dict(attrs)
        if "data-no-minify" in attr_dict:
            return

        if tag == "link":
            rels = (attr_dict.get("rel") or "").lower().split()
            url = (attr_dict.get("href") or "").strip()
            if "stylesheet" not in rels or not url:
                return
            asset_type = AssetType.CSS
            media = (attr_dict.get("media") or "all").strip()
        else:
            url = (attr_dict.get("src") or "").strip()
            if not url:
                return
            asset_type = AssetType.JS
            media = "all"

        self._references.append(
            AssetReference(
                handle=derive_handle(attr_dict, url, asset_type),
                asset_type=asset_type,
                url=url,
                tag=self.get_starttag_text() or "",
                media=media,
                position=self._offset(),
            )
        )


def derive_handle(attr_dict: dict[str, str | None], url: str, asset_type: str) -> str:
    """Derive the logical handle of an asset tag.

    Order: ``data-handle``, then ``id`` without its ``-css``/``-js`` suffix,
    then the slugified file name.
    """
    handle = (attr_dict.get("data-handle") or "").strip()
    if handle:
        return handle

    element_id = (attr_dict.get("id") or "").strip()
    if element_id:
        suffix = f"-{str(asset_type)}"
        if element_id.endswith(suffix) and len(element_id) > len(suffix):
            return element_id[: -len(suffix)]
        return element_id

    stem = PurePosixPath(urlsplit(url).path).stem
    return slugify(stem) or str(asset_type)


def extract_references(html: str) -> list[AssetReference]:
    """Extract stylesheet and script references from HTML, in document order."""
    extractor = AssetTagExtractor()
    extractor.feed(html)
    extractor.close()
    return extractor.references
