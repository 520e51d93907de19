"""
Trigger dispatch engine.

One run walks the selected handlers in registry order, expands each glob
pattern, asks the state tracker which matches are stale, invokes the
handler for those, interprets the returned status flags and finally writes
the fingerprint set back in one atomic replace.

Per-path failures are isolated: they are reported with a dump of the run
log and the run carries on.  Only structural problems abort or fail the
whole run: an unknown trigger name, an unusable log directory, or a state
file that cannot be written at the end.

Status interpretation within one glob pattern's matches::

    FAIL            report, path not recorded, next match
    SKIP            path not recorded, next match
    SUCCESS         path recorded unless DROP
    ... | BREAK     remaining matches of this pattern are not handed to the
                    action; they are recorded unless the breaking status
                    also carries FAIL, SKIP or DROP
"""

from __future__ import annotations

import glob
import sys
from dataclasses import dataclass, field
from typing import TextIO

from usysconf.core.context import Context
from usysconf.core.errors import (
    HandlerError,
    StateLoadError,
    StateRecordError,
    StateWriteError,
    UsysconfError,
)
from usysconf.core.logging import LogContext, get_logger
from usysconf.core.settings import UsysconfSettings, get_settings
from usysconf.core.state import StateTracker
from usysconf.core.status import Status
from usysconf.framework.registry import HANDLERS, get_handlers
from usysconf.framework.reporter import FailureReporter, RunLog
from usysconf.handlers.base import Handler

log = get_logger(__name__)


@dataclass
class RunReport:
    """Outcome of one run."""

    trigger: str | None
    handlers_run: list[str] = field(default_factory=list)
    handlers_skipped: list[str] = field(default_factory=list)
    invocations: int = 0
    recorded: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)
    state_written: bool = False

    @property
    def success(self) -> bool:
        """At least one handler was selected and the state was persisted."""
        return bool(self.handlers_run or self.handlers_skipped) and self.state_written

    def to_dict(self) -> dict:
        return {
            "trigger": self.trigger,
            "handlers_run": list(self.handlers_run),
            "handlers_skipped": list(self.handlers_skipped),
            "invocations": self.invocations,
            "recorded": self.recorded,
            "failures": [{"trigger": t, "path": p} for t, p in self.failures],
            "state_written": self.state_written,
            "success": self.success,
        }


class TriggerDispatcher:
    """
    Runs handlers against the filesystem and the persisted state.

    Args:
        context: Run context handed to every handler action
        settings: Log and state locations (process settings by default)
        handlers: Registry to select from (the built-in registry by default)
        tracker: State tracker (one bound to ``settings.state_file`` by default)
        stream: Operator error stream for failure dumps (stderr by default)
    """

    def __init__(
        self,
        context: Context,
        *,
        settings: UsysconfSettings | None = None,
        handlers: tuple[Handler, ...] = HANDLERS,
        tracker: StateTracker | None = None,
        stream: TextIO | None = None,
    ):
        self.context = context
        self.settings = settings or get_settings()
        self.handlers = handlers
        self.tracker = tracker if tracker is not None else StateTracker(self.settings.state_file)
        self.run_log = RunLog(self.settings.log_file)
        self.stream = stream or sys.stderr
        self.reporter = FailureReporter(self.run_log, stream=self.stream)

    def run(self, name: str | None = None) -> RunReport:
        """
        Run all handlers, or only those named ``name``.

        Raises:
            UnknownTriggerError: ``name`` is not in the registry (nothing done)
            LogDirectoryError: the log directory cannot be created
        """
        selected = get_handlers(name, self.handlers)
        self.run_log.ensure_directory()

        report = RunReport(trigger=name)
        with self.run_log, LogContext(run_trigger=name or "all"):
            log.info("dispatch.started", handlers=len(selected), dry_run=self.context.dry_run)
            self._load_state()

            for handler in selected:
                if self.context.should_skip(handler.name):
                    log.info("dispatch.handler_skipped", trigger=handler.name)
                    report.handlers_skipped.append(handler.name)
                    continue
                with LogContext(trigger=handler.name):
                    self._handle_one(handler, report)
                report.handlers_run.append(handler.name)

            report.failures = list(self.reporter.failures)
            report.state_written = self._write_state(prune=name is None)
            log.info("dispatch.finished", **report.to_dict())

        return report

    def _load_state(self) -> None:
        try:
            self.tracker.load()
        except StateLoadError as e:
            # Crack on regardless: empty state means every path is reprocessed once.
            log.warning("state.load_failed", **e.to_dict())

    def _write_state(self, prune: bool) -> bool:
        if self.context.dry_run:
            log.info("state.write_skipped", reason="dry-run")
            return True
        try:
            self.tracker.write(prune=prune)
        except StateWriteError as e:
            log.error("state.write_failed", **e.to_dict())
            print("Failed to write state file!", file=self.stream)
            return False
        return True

    def _handle_one(self, handler: Handler, report: RunReport) -> None:
        for pattern in handler.glob_patterns:
            # Unsorted, as enumerated by the filesystem; no matches is fine.
            matches = glob.glob(pattern)
            if not matches:
                log.debug("dispatch.no_matches", pattern=pattern)
                continue

            broken: Status | None = None
            for path in matches:
                if broken is not None:
                    if broken.records_remaining:
                        self._record(path, report)
                    continue

                if not self.context.force and not self.tracker.needs_update(path):
                    continue

                status = self._invoke(handler, path)
                report.invocations += 1

                if Status.FAIL in status:
                    self.reporter.report(handler.name, path)
                elif status.recordable:
                    self._record(path, report)

                if Status.BREAK in status:
                    broken = status

    def _invoke(self, handler: Handler, path: str) -> Status:
        with LogContext(path=path):
            try:
                status = handler.action(self.context, path)
            except Exception as e:
                error = HandlerError(f"Handler raised: {e}", cause=e).with_context(
                    trigger=handler.name, path=path
                )
                log.exception("handler.error", **error.to_dict())
                return Status.FAIL
            if not isinstance(status, Status):
                error = HandlerError(f"Handler returned {status!r} instead of a Status").with_context(
                    trigger=handler.name, path=path
                )
                log.error("handler.bad_status", **error.to_dict())
                return Status.FAIL
            log.debug("handler.invoked", status=str(status), outcome=status.outcome)
            return status

    def _record(self, path: str, report: RunReport) -> None:
        try:
            self.tracker.push_path(path)
        except StateRecordError as e:
            log.error("state.record_failed", **e.to_dict())
            print(f"Failed to record path {path}", file=self.stream)
            return
        report.recorded += 1


def run_triggers(
    context: Context,
    name: str | None = None,
    *,
    settings: UsysconfSettings | None = None,
    handlers: tuple[Handler, ...] = HANDLERS,
    stream: TextIO | None = None,
) -> bool:
    """Run triggers and return the overall verdict; fatal errors are reported, not raised."""
    dispatcher = TriggerDispatcher(context, settings=settings, handlers=handlers, stream=stream)
    try:
        report = dispatcher.run(name)
    except UsysconfError as e:
        log.error("dispatch.aborted", **e.to_dict())
        print(e.message, file=stream or sys.stderr)
        return False
    return report.success
