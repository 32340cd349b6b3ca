"""Local filesystem store for minified artifacts and their gzip copies."""

from __future__ import annotations

import gzip
import logging
import os
import stat
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..exceptions import ArtifactIOError, MinifyError, SourceNotFound
from ..keys import artifact_filename, compute_cache_key
from ..options import invalidate_options

logger = logging.getLogger(__name__)

GZIP_LEVEL = 9
ARTIFACT_FILE_MODE = 0o644


@dataclass(frozen=True)
class ArtifactPaths:
    minified_path: Path
    compressed_path: Path | None = None

    @property
    def filename(self) -> str:
        return self.minified_path.name


@dataclass(frozen=True)
class _KnownArtifact:
    source_mtime_ns: int
    source_size: int
    paths: ArtifactPaths


def compressed_path_for(minified_path: Path) -> Path:
    return minified_path.with_name(f"{minified_path.name}.gz")


class ArtifactStore:
    """Local filesystem cache of minified artifacts.

    Artifacts are named ``{type}-{handle}-{cacheKey}.min.{type}`` with an
    optional ``.gz`` sibling. Every write goes to a unique temporary file in
    the cache directory and is renamed into place, so concurrent readers
    never observe a partial file. Concurrent writers of the same artifact
    produce identical bytes; the last rename wins.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir)
        self._known: dict[tuple[str, str, str, bool], _KnownArtifact] = {}

    def _get_full_path(self, filename: str) -> Path:
        full_path = self.cache_dir / filename
        if full_path.resolve().parent != self.cache_dir.resolve():
            raise ArtifactIOError(
                f"Artifact name {filename!r} resolves outside the cache directory"
            )
        return full_path

    def get_or_create(
        self,
        asset_type: str,
        handle: str,
        source_path: Path,
        minify: Callable[[str], str],
        *,
        post_process: Callable[[str], str] | None = None,
        gzip_enabled: bool = True,
    ) -> ArtifactPaths:
        """Return a fresh artifact for ``source_path``, generating it if needed.

        Raises:
            SourceNotFound: the source disappeared after resolution.
            MinifyError: ``minify`` raised.
            ArtifactIOError: reading the source or writing the cache failed.
        """
        asset_type = str(asset_type)
        source_path = Path(source_path)
        source_stat = self._stat_source(source_path)

        known_key = (asset_type, handle, str(source_path), gzip_enabled)
        known = self._known.get(known_key)
        if (
            known is not None
            and known.source_mtime_ns == source_stat.st_mtime_ns
            and known.source_size == source_stat.st_size
            and self._is_fresh(known.paths, source_stat.st_mtime_ns)
        ):
            return known.paths

        cache_key = compute_cache_key(source_path)
        minified_path = self._get_full_path(
            artifact_filename(asset_type, handle, cache_key)
        )
        paths = ArtifactPaths(
            minified_path=minified_path,
            compressed_path=compressed_path_for(minified_path) if gzip_enabled else None,
        )

        if not self._is_current(minified_path, source_stat.st_mtime_ns):
            self._generate(source_path, paths, minify, post_process)
        elif paths.compressed_path is not None and not paths.compressed_path.exists():
            self._restore_compressed(paths.minified_path, paths.compressed_path)

        self._known[known_key] = _KnownArtifact(
            source_mtime_ns=source_stat.st_mtime_ns,
            source_size=source_stat.st_size,
            paths=paths,
        )
        return paths

    def _stat_source(self, source_path: Path) -> os.stat_result:
        try:
            return source_path.stat()
        except FileNotFoundError as e:
            raise SourceNotFound(f"Source file vanished: {source_path}") from e
        except OSError as e:
            raise ArtifactIOError(f"Cannot stat {source_path}: {e}") from e

    @staticmethod
    def _is_current(minified_path: Path, source_mtime_ns: int) -> bool:
        try:
            return minified_path.stat().st_mtime_ns >= source_mtime_ns
        except FileNotFoundError:
            return False

    def _is_fresh(self, paths: ArtifactPaths, source_mtime_ns: int) -> bool:
        if not self._is_current(paths.minified_path, source_mtime_ns):
            return False
        return paths.compressed_path is None or paths.compressed_path.exists()

    def _generate(
        self,
        source_path: Path,
        paths: ArtifactPaths,
        minify: Callable[[str], str],
        post_process: Callable[[str], str] | None,
    ) -> None:
        try:
            source = source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ArtifactIOError(f"Cannot read {source_path}: {e}") from e

        try:
            minified = minify(source)
        except Exception as e:  # noqa: BLE001
            raise MinifyError(f"Minifier failed for {source_path}: {e}") from e

        if post_process is not None:
            minified = post_process(minified)

        data = minified.encode("utf-8")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            if paths.compressed_path is not None:
                self._write_atomic(paths.compressed_path, _compress(data))
            self._write_atomic(paths.minified_path, data)
        except OSError as e:
            raise ArtifactIOError(f"Cannot write {paths.minified_path}: {e}") from e

        logger.debug("Wrote artifact %s", paths.minified_path)

    def _restore_compressed(self, minified_path: Path, compressed_path: Path) -> None:
        try:
            data = minified_path.read_bytes()
            self._write_atomic(compressed_path, _compress(data))
        except OSError as e:
            raise ArtifactIOError(f"Cannot write {compressed_path}: {e}") from e

    def _write_atomic(self, path: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.chmod(tmp_name, ARTIFACT_FILE_MODE)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def sweep(self, max_age_seconds: int) -> int:
        """Delete cache entries at least ``max_age_seconds`` old."""
        now = time.time()
        return self._delete_entries(
            lambda st: now - st.st_mtime >= max_age_seconds
        )

    def purge_all(self) -> int:
        """Delete every cache entry and drop the options snapshot."""
        deleted = self._delete_entries(lambda st: True)
        self._known.clear()
        invalidate_options()
        return deleted

    def _delete_entries(self, should_delete: Callable[[os.stat_result], bool]) -> int:
        try:
            entries = list(self.cache_dir.iterdir())
        except FileNotFoundError:
            return 0

        deleted = 0
        for entry in entries:
            try:
                entry_stat = entry.stat()
                if not stat.S_ISREG(entry_stat.st_mode) or not should_delete(entry_stat):
                    continue
                entry.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Could not delete cached file %s: %s", entry, e)
                continue
            deleted += 1
        return deleted


def _compress(data: bytes) -> bytes:
    return gzip.compress(data, compresslevel=GZIP_LEVEL, mtime=0)
