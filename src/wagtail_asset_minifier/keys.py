"""Content-derived cache keys for artifacts."""

from __future__ import annotations

import hashlib
from pathlib import Path

from .exceptions import ArtifactIOError

_CHUNK_SIZE = 64 * 1024


def compute_cache_key(path: Path) -> str:
    """Return the MD5 hex digest of the file's bytes.

    MD5 is only used to detect content changes, not for security.
    """
    digest = hashlib.md5(usedforsecurity=False)
    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as e:
        raise ArtifactIOError(f"Cannot read {path}: {e}") from e
    return digest.hexdigest()


def artifact_filename(asset_type: str, handle: str, cache_key: str) -> str:
    """Deterministic artifact filename for a (type, handle, key) triple."""
    kind = str(asset_type)
    return f"{kind}-{handle}-{cache_key}.min.{kind}"
