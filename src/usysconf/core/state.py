"""
Persistent path fingerprint state.

The state tracker remembers, across runs, a fingerprint for every path a
handler has processed.  It answers "does this path need reprocessing" and
accumulates the fingerprint set that is written back, as a whole, when the
run ends.

Manifesto:
    Re-running a trigger pass must be cheap and idempotent:
    - **Skip unchanged work:** A path whose fingerprint matches is not handed
      to its handler again
    - **Tolerate damage:** A missing or corrupt state file means "nothing was
      recorded", never a failed run
    - **Atomic replace:** The state file is written to a temporary sibling
      and renamed over the old one
    - **Self-cleaning:** Only paths confirmed during the run are persisted,
      so paths no handler matches any more drop out

Architecture:
    ::

        load()                      needs_update(path)
        state file ──► _entries ◄── compare fingerprint ──► mark seen
                          ▲
                          │ push_path(path)  (fingerprint + mark seen)
                          │
        write(prune=True) └──► {seen paths} ──► tmp file ──► os.replace

    ``needs_update`` consults the working map, so a path pushed earlier in
    the same run by one handler is up to date for a later handler unless the
    earlier handler's side effects changed it again.

Examples:
    >>> tracker = StateTracker("/var/lib/usysconf/status.json")
    >>> tracker.load()
    >>> if tracker.needs_update("/usr/share/fonts"):
    ...     tracker.push_path("/usr/share/fonts")
    >>> tracker.write()

Guardrails:
    ❌ DON'T: Treat StateLoadError as fatal
    ✅ DO: Log it and continue with the (empty) tracker

Tags:
    state, fingerprint, idempotency, atomic-write, usysconf

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from usysconf.core.errors import StateLoadError, StateRecordError, StateWriteError
from usysconf.core.hashing import normalize_path, path_fingerprint
from usysconf.core.logging import get_logger

log = get_logger(__name__)

STATE_VERSION = 1


class StateDocument(BaseModel):
    """On-disk layout of the state file."""

    version: int = STATE_VERSION
    entries: dict[str, str] = Field(default_factory=dict)


class StateTracker:
    """Path -> fingerprint store for one run."""

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)
        self._entries: dict[str, str] = {}
        self._seen: set[str] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str | os.PathLike) and normalize_path(path) in self._entries

    def load(self) -> None:
        """
        Replace the in-memory entries with the persisted ones.

        Raises:
            StateLoadError: the file is missing, unreadable or corrupt. The
                tracker is left empty and usable.
        """
        self._entries = {}
        self._seen = set()
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError as e:
            raise StateLoadError("No state file recorded yet", cause=e).with_context(path=str(self.path))
        except OSError as e:
            raise StateLoadError(f"Cannot read state file: {e}", cause=e).with_context(path=str(self.path))

        try:
            document = StateDocument.model_validate_json(raw)
        except ValidationError as e:
            raise StateLoadError("Invalid state file ignored", cause=e).with_context(path=str(self.path))

        if document.version != STATE_VERSION:
            raise StateLoadError(f"Unsupported state version {document.version}").with_context(
                path=str(self.path)
            )

        self._entries = dict(document.entries)
        log.debug("state.loaded", path=str(self.path), entries=len(self._entries))

    def needs_update(self, path: str | os.PathLike[str]) -> bool:
        """True if ``path`` has no recorded fingerprint or its fingerprint changed."""
        key = normalize_path(path)
        recorded = self._entries.get(key)
        if recorded is None:
            return True
        try:
            current = path_fingerprint(key)
        except OSError:
            return True
        if current != recorded:
            return True
        self._seen.add(key)
        return False

    def push_path(self, path: str | os.PathLike[str]) -> None:
        """
        Compute and store the fingerprint for ``path``.

        Raises:
            StateRecordError: the path cannot be stat'ed
        """
        key = normalize_path(path)
        try:
            self._entries[key] = path_fingerprint(key)
        except OSError as e:
            raise StateRecordError(f"Failed to record path {key}", cause=e).with_context(path=key)
        self._seen.add(key)

    def recorded_paths(self) -> list[str]:
        """Paths that would be persisted by ``write(prune=True)``."""
        return sorted(self._seen)

    def entries(self) -> dict[str, str]:
        """Copy of the working path -> fingerprint map."""
        return dict(self._entries)

    def write(self, prune: bool = True) -> None:
        """
        Atomically persist the fingerprint set, replacing prior contents.

        With ``prune`` only paths confirmed during this run (up to date or
        pushed) are kept; otherwise every loaded entry is carried forward.

        Raises:
            StateWriteError: the directory or file cannot be written
        """
        if prune:
            entries = {key: self._entries[key] for key in sorted(self._seen)}
        else:
            entries = dict(sorted(self._entries.items()))
        payload = StateDocument(entries=entries).model_dump_json(indent=2)

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(mode=0o750, parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise StateWriteError(f"Failed to write state file: {e}", cause=e).with_context(
                path=str(self.path)
            )
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        self._entries = entries
        log.debug("state.written", path=str(self.path), entries=len(entries))
