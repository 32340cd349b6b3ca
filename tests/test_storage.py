"""Tests for the local artifact store.

Covers cache-key naming, idempotence, staleness, atomic writes, the gzip
sibling, failure translation, age-based sweeping and full purge.
"""

from __future__ import annotations

import gzip
import hashlib
import os
import threading
import time
from unittest import mock

import pytest

from wagtail_asset_minifier.exceptions import (
    ArtifactIOError,
    MinifyError,
    SourceNotFound,
)
from wagtail_asset_minifier.storage import ArtifactStore

from .conftest import upper_minify


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "src" / "style.css"
    path.parent.mkdir()
    path.write_text("body { color: red; }\n", encoding="utf-8")
    return path


def _md5(path):
    return hashlib.md5(path.read_bytes()).hexdigest()


def _bump_mtime(path, seconds=10):
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


class TestGetOrCreate:
    def test_creates_named_artifact_and_gzip_sibling(self, store, source, cache_dir):
        """A miss writes ``{type}-{handle}-{md5}.min.{type}`` plus ``.gz``.

        Purpose: Verify the deterministic artifact naming scheme.
        Category: Normal case
        Target: ArtifactStore.get_or_create()
        Technique: Equivalence partitioning
        Test data: Small CSS source, gzip enabled
        """
        paths = store.get_or_create("css", "theme", source, upper_minify)

        expected = cache_dir / f"css-theme-{_md5(source)}.min.css"
        assert paths.minified_path == expected
        assert paths.compressed_path == cache_dir / f"{expected.name}.gz"
        assert expected.read_text(encoding="utf-8") == "BODY { COLOR: RED; }"
        assert paths.filename == expected.name

    def test_creates_cache_directory_recursively(self, tmp_path, source):
        cache_dir = tmp_path / "a" / "b" / "cache"
        store = ArtifactStore(cache_dir)

        paths = store.get_or_create("js", "app", source, upper_minify)

        assert cache_dir.is_dir()
        assert paths.minified_path.exists()

    def test_second_call_returns_same_paths_without_writing(self, store, source):
        """Unchanged bytes reuse the artifact and perform no write.

        Purpose: Idempotence of sequential invocations.
        Category: Normal case
        Target: ArtifactStore.get_or_create()
        Technique: State transition
        Test data: Same source processed twice
        """
        first = store.get_or_create("css", "theme", source, upper_minify)

        with mock.patch.object(store, "_write_atomic") as mock_write:
            second = store.get_or_create("css", "theme", source, upper_minify)

        assert second == first
        mock_write.assert_not_called()

    def test_known_artifact_skips_hashing(self, store, source):
        """The mtime pre-check short-circuits before computing the cache key."""
        store.get_or_create("css", "theme", source, upper_minify)

        with mock.patch(
            "wagtail_asset_minifier.storage.local.compute_cache_key"
        ) as mock_key:
            store.get_or_create("css", "theme", source, upper_minify)

        mock_key.assert_not_called()

    def test_fresh_store_reuses_existing_artifact(self, cache_dir, source):
        """Another process (new store, empty memo) reuses the file on disk."""
        first = ArtifactStore(cache_dir).get_or_create("css", "theme", source, upper_minify)
        minify = mock.Mock(side_effect=upper_minify)

        second = ArtifactStore(cache_dir).get_or_create("css", "theme", source, minify)

        assert second == first
        minify.assert_not_called()

    def test_content_change_yields_new_artifact_and_keeps_old(self, store, source):
        """Different bytes produce a different key; the old file is untouched.

        Purpose: Content addressing, no in-place mutation.
        Category: Normal case
        Target: ArtifactStore.get_or_create()
        Technique: State transition
        Test data: Source rewritten between calls
        """
        first = store.get_or_create("css", "theme", source, upper_minify)
        old_bytes = first.minified_path.read_bytes()

        source.write_text("body { color: blue; }\n", encoding="utf-8")
        _bump_mtime(source)
        second = store.get_or_create("css", "theme", source, upper_minify)

        assert second.minified_path != first.minified_path
        assert first.minified_path.read_bytes() == old_bytes
        assert second.minified_path.read_text(encoding="utf-8") == "BODY { COLOR: BLUE; }"

    def test_source_newer_than_artifact_regenerates(self, cache_dir, source):
        """Staleness: same bytes but newer source mtime triggers regeneration."""
        store = ArtifactStore(cache_dir)
        first = store.get_or_create("css", "theme", source, upper_minify)
        _bump_mtime(source, seconds=60)
        minify = mock.Mock(side_effect=upper_minify)

        second = store.get_or_create("css", "theme", source, minify)

        assert second.minified_path == first.minified_path
        minify.assert_called_once()

    def test_post_process_applied_before_write(self, store, source):
        paths = store.get_or_create(
            "css",
            "theme",
            source,
            upper_minify,
            post_process=lambda css: css + "/*post*/",
        )

        assert paths.minified_path.read_text(encoding="utf-8").endswith("/*post*/")

    def test_gzip_round_trip_matches_minified_bytes(self, store, source):
        """Decompressing the ``.gz`` sibling gives back the minified bytes."""
        paths = store.get_or_create("css", "theme", source, upper_minify)

        assert gzip.decompress(paths.compressed_path.read_bytes()) == (
            paths.minified_path.read_bytes()
        )

    def test_gzip_disabled_writes_no_sibling(self, store, source, cache_dir):
        paths = store.get_or_create(
            "css", "theme", source, upper_minify, gzip_enabled=False
        )

        assert paths.compressed_path is None
        assert [p.name for p in cache_dir.iterdir()] == [paths.filename]

    def test_missing_gzip_sibling_is_restored(self, cache_dir, source):
        paths = ArtifactStore(cache_dir).get_or_create("css", "theme", source, upper_minify)
        paths.compressed_path.unlink()
        minify = mock.Mock(side_effect=upper_minify)

        ArtifactStore(cache_dir).get_or_create("css", "theme", source, minify)

        minify.assert_not_called()
        assert gzip.decompress(paths.compressed_path.read_bytes()) == (
            paths.minified_path.read_bytes()
        )

    def test_artifact_is_world_readable(self, store, source):
        paths = store.get_or_create("css", "theme", source, upper_minify)

        assert paths.minified_path.stat().st_mode & 0o777 == 0o644

    def test_concurrent_writers_leave_one_pair(self, cache_dir, source):
        """Concurrent invocations agree on the URL and leave one complete pair.

        Purpose: Atomic write-then-rename under a cache-miss race.
        Category: Concurrency
        Target: ArtifactStore.get_or_create()
        Technique: Error guessing (thundering herd)
        Test data: Two threads, each with its own store (separate processes)
        """
        barrier = threading.Barrier(2)
        results = []

        def _minify(text):
            barrier.wait(timeout=5)
            return upper_minify(text)

        def _worker():
            results.append(
                ArtifactStore(cache_dir).get_or_create("css", "theme", source, _minify)
            )

        threads = [threading.Thread(target=_worker) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(results) == 2
        assert results[0] == results[1]
        names = sorted(p.name for p in cache_dir.iterdir())
        assert names == sorted([results[0].filename, f"{results[0].filename}.gz"])
        assert results[0].minified_path.read_text(encoding="utf-8") == (
            "BODY { COLOR: RED; }"
        )


class TestGetOrCreateErrors:
    def test_missing_source_raises_source_not_found(self, store, tmp_path):
        with pytest.raises(SourceNotFound):
            store.get_or_create("css", "theme", tmp_path / "nope.css", upper_minify)

    def test_minifier_failure_raises_minify_error(self, store, source, cache_dir):
        """A raising minifier becomes MinifyError and leaves no files behind."""

        def _boom(text):
            raise ValueError("parse error")

        with pytest.raises(MinifyError, match="parse error"):
            store.get_or_create("css", "theme", source, _boom)

        assert not cache_dir.exists() or list(cache_dir.iterdir()) == []

    def test_rename_failure_raises_io_error_and_cleans_temp(
        self, store, source, cache_dir
    ):
        """A failing rename surfaces as ArtifactIOError without temp leftovers."""
        with mock.patch(
            "wagtail_asset_minifier.storage.local.os.replace",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(ArtifactIOError, match="disk full"):
                store.get_or_create("css", "theme", source, upper_minify)

        assert list(cache_dir.iterdir()) == []

    def test_undecodable_source_raises_io_error(self, store, tmp_path):
        path = tmp_path / "latin1.css"
        path.write_bytes(b"body { content: '\xff'; }")

        with pytest.raises(ArtifactIOError):
            store.get_or_create("css", "theme", path, upper_minify)

    def test_handle_escaping_cache_dir_is_rejected(self, store, source):
        with pytest.raises(ArtifactIOError, match="outside the cache directory"):
            store.get_or_create("css", "nested/../../evil", source, upper_minify)


class TestSweep:
    def test_max_age_zero_deletes_everything_then_zero(self, store, cache_dir):
        """Sweeping with max age 0 deletes every file; a second sweep returns 0.

        Purpose: Eviction count and idempotence on an empty directory.
        Category: Boundary value
        Target: ArtifactStore.sweep(0)
        Technique: Boundary value analysis
        Test data: Three cache files
        """
        cache_dir.mkdir()
        for name in ("css-a-1.min.css", "css-a-1.min.css.gz", "js-b-2.min.js"):
            (cache_dir / name).write_text("x", encoding="utf-8")

        assert store.sweep(0) == 3
        assert list(cache_dir.iterdir()) == []
        assert store.sweep(0) == 0

    def test_only_old_files_are_deleted(self, store, cache_dir):
        cache_dir.mkdir()
        old = cache_dir / "css-old-1.min.css"
        new = cache_dir / "css-new-2.min.css"
        old.write_text("x", encoding="utf-8")
        new.write_text("y", encoding="utf-8")
        past = time.time() - 3600
        os.utime(old, (past, past))

        assert store.sweep(600) == 1
        assert not old.exists()
        assert new.exists()

    def test_missing_directory_returns_zero(self, tmp_path):
        assert ArtifactStore(tmp_path / "absent").sweep(0) == 0

    def test_subdirectories_are_left_alone(self, store, cache_dir):
        (cache_dir / "nested").mkdir(parents=True)

        assert store.sweep(0) == 0
        assert (cache_dir / "nested").is_dir()

    def test_file_deleted_concurrently_counts_as_success(self, store, cache_dir):
        cache_dir.mkdir()
        (cache_dir / "css-a-1.min.css").write_text("x", encoding="utf-8")

        with mock.patch(
            "pathlib.Path.unlink", side_effect=FileNotFoundError
        ):
            assert store.sweep(0) == 0


class TestPurgeAll:
    def test_deletes_all_files_and_invalidates_options(self, store, source, cache_dir):
        store.get_or_create("css", "theme", source, upper_minify)

        with mock.patch(
            "wagtail_asset_minifier.storage.local.invalidate_options"
        ) as mock_invalidate:
            deleted = store.purge_all()

        assert deleted == 2
        assert list(cache_dir.iterdir()) == []
        mock_invalidate.assert_called_once_with()

    def test_purge_forgets_known_artifacts(self, store, source):
        store.get_or_create("css", "theme", source, upper_minify)
        with mock.patch("wagtail_asset_minifier.storage.local.invalidate_options"):
            store.purge_all()

        paths = store.get_or_create("css", "theme", source, upper_minify)

        assert paths.minified_path.exists()

    def test_missing_directory_returns_zero(self, tmp_path):
        with mock.patch("wagtail_asset_minifier.storage.local.invalidate_options"):
            assert ArtifactStore(tmp_path / "absent").purge_all() == 0
