"""JavaScript minifier backed by the terser CLI."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from django.conf import settings

from ..conf import get_setting
from .base import BaseMinifier

TERSER_TIMEOUT_SECONDS = 30


class TerserMinifier(BaseMinifier):
    """Minify scripts by piping them through ``terser``.

    Selected with ``"JS_MINIFIER": "wagtail_asset_minifier.minifiers.terser.TerserMinifier"``.
    A missing binary or a failing run raises, which makes the page fall
    back to the original script.
    """

    def minify(self, source: str) -> str:
        terser_path = find_terser()
        if terser_path is None:
            raise FileNotFoundError("terser executable not found")

        result = subprocess.run(  # noqa: S603
            [terser_path, *get_setting("TERSER_OPTIONS")],
            input=source,
            capture_output=True,
            text=True,
            timeout=TERSER_TIMEOUT_SECONDS,
            check=True,
        )
        return result.stdout


def find_terser() -> str | None:
    """Find the terser CLI binary.

    Search order: TERSER_PATH setting -> node_modules/.bin/terser -> PATH.
    """
    explicit: str | None = get_setting("TERSER_PATH")
    if explicit:
        return explicit

    base_dir = getattr(settings, "BASE_DIR", None)
    if base_dir is not None:
        local = Path(base_dir) / "node_modules" / ".bin" / "terser"
        if local.exists():
            return str(local)
    return shutil.which("terser")
