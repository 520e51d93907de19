"""Run log and failure reporting.

The run log is a persistent file collecting every log event (including the
output of the commands handlers spawn) for the duration of a run.  When a
handler reports a failure, the whole file is copied to the operator's error
stream right away.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import TextIO

from usysconf.core.errors import LogDirectoryError
from usysconf.core.logging import file_formatter, get_logger

log = get_logger(__name__)


class RunLog:
    """Attach a file handler to the root logger while the run is active."""

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)
        self._handler: logging.FileHandler | None = None

    def ensure_directory(self) -> None:
        """
        Raises:
            LogDirectoryError: the log directory cannot be created
        """
        directory = self.path.parent
        if directory.is_dir():
            return
        try:
            directory.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise LogDirectoryError(str(directory), cause=e) from e

    def open(self) -> None:
        if self._handler is not None:
            return
        handler = logging.FileHandler(self.path, encoding="utf-8")
        handler.setFormatter(file_formatter())
        logging.getLogger().addHandler(handler)
        self._handler = handler

    def close(self) -> None:
        if self._handler is None:
            return
        logging.getLogger().removeHandler(self._handler)
        self._handler.close()
        self._handler = None

    def __enter__(self) -> RunLog:
        self.open()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def dump(self, stream: TextIO) -> None:
        """Copy the full current contents of the log to ``stream``."""
        if self._handler is not None:
            self._handler.flush()
        try:
            with open(self.path, encoding="utf-8", errors="replace") as fh:
                shutil.copyfileobj(fh, stream)
        except OSError as e:
            print(f"open({self.path}): failed to open log file: {e}", file=stream)
        stream.flush()


class FailureReporter:
    """Surface the run log to the operator on each handler failure."""

    def __init__(self, run_log: RunLog, stream: TextIO | None = None):
        self.run_log = run_log
        self.stream = stream
        self.failures: list[tuple[str, str]] = []

    def report(self, trigger: str, path: str) -> None:
        self.failures.append((trigger, path))
        log.error("handler.failed", trigger=trigger, path=path)
        stream = self.stream or sys.stderr
        print("Failed", file=stream)
        self.run_log.dump(stream)
