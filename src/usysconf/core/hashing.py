"""
Deterministic hashing and path fingerprints.

A fingerprint is the opaque value the state tracker stores per processed
path.  It must change whenever a package manager touches the path and must
stay identical across runs while the path is left alone, without reading
file contents (the tracked paths include whole library directories).

Manifesto:
    Fingerprints need to be:
    - **Deterministic:** Same on-disk metadata always produces the same value
    - **Cheap:** One ``stat()`` call, no content reads
    - **Sensitive to package installs:** Package managers frequently preserve
      the packaged mtime, so inode and ctime participate as well

Architecture:
    ::

        path_fingerprint(path)
            │  os.stat (follows symlinks)
            ▼
        compute_hash(mode, size, mtime_ns, ctime_ns, ino)
            │  SHA-256 over "|".join(values)
            ▼
        32-char hex string

Examples:
    >>> compute_hash("a", "b") == compute_hash("a", "b")
    True
    >>> compute_hash("a", "b") != compute_hash("b", "a")
    True

Tags:
    hashing, fingerprint, change-detection, usysconf

Doc-Types:
    - API Reference
"""

import hashlib
import os
from typing import Any


def compute_hash(*values: Any, length: int = 32) -> str:
    """
    Compute deterministic hash from values.

    Values are converted to strings and joined with '|' before SHA-256 is
    taken, so the hash is order-dependent and type-agnostic.

    Args:
        *values: Values to hash (converted to strings)
        length: Hex digest length (default 32 = 128 bits)

    Returns:
        Hex string of specified length
    """
    content = "|".join(str(v) for v in values)
    return hashlib.sha256(content.encode()).hexdigest()[:length]


def path_fingerprint(path: str | os.PathLike[str]) -> str:
    """
    Fingerprint the current on-disk state of ``path``.

    Symlinks are followed; a dangling symlink is fingerprinted as the link
    itself.

    Raises:
        OSError: if the path cannot be stat'ed
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        if not os.path.islink(path):
            raise
        st = os.lstat(path)
    return compute_hash(st.st_mode, st.st_size, st.st_mtime_ns, st.st_ctime_ns, st.st_ino)


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Key used for a path in the state map: absolute, normalized, no trailing slash."""
    return os.path.abspath(os.path.normpath(os.fspath(path)))
