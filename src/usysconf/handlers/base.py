"""Handler descriptor and helpers shared by the built-in handlers.

A handler is static metadata plus one action.  The action receives the run
context and one matched absolute path, checks its own preconditions,
performs at most one externally visible side effect and returns a
``Status``.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from usysconf.core.context import Context, ContextFlag
from usysconf.core.logging import get_logger
from usysconf.core.status import Status

log = get_logger(__name__)

HandlerAction = Callable[[Context, str], Status]

# Exit status reported when a command cannot be spawned at all.
SPAWN_FAILED = 127


@dataclass(frozen=True)
class Handler:
    """Immutable handler descriptor compiled into the registry."""

    name: str
    description: str
    action: HandlerAction = field(repr=False, compare=False)
    glob_patterns: tuple[str, ...] = ()
    required_executable: str | None = None

    def is_available(self) -> bool:
        """True when the required executable is present (or none is needed)."""
        return self.required_executable is None or is_executable(self.required_executable)


def is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def is_dir(path: str) -> bool:
    return os.path.isdir(path)


def exec_command(
    context: Context,
    argv: Sequence[str],
    env: Mapping[str, str] | None = None,
) -> int:
    """
    Run ``argv`` to completion and return its exit status.

    Combined stdout/stderr is logged, so it ends up in the run log that is
    dumped when a handler fails. In dry-run mode nothing is spawned and 0 is
    returned.
    """
    command = list(argv)
    if context.dry_run:
        log.info("command.dry_run", argv=command)
        return 0

    run_env = None
    if env:
        run_env = {**os.environ, **env}

    log.debug("command.started", argv=command)
    try:
        proc = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            env=run_env,
            text=True,
            check=False,
        )
    except OSError as e:
        log.error("command.spawn_failed", argv=command, error=str(e))
        return SPAWN_FAILED

    output = proc.stdout.strip() if proc.stdout else ""
    if proc.returncode != 0:
        log.error("command.failed", argv=command, returncode=proc.returncode, output=output)
    elif output:
        log.debug("command.output", argv=command, output=output)
    return proc.returncode


def run_once(
    context: Context,
    task: str,
    argv: Sequence[str],
    *,
    skip_when: ContextFlag | None = None,
    env: Mapping[str, str] | None = None,
) -> Status:
    """
    Run one command for a whole glob pass.

    Returns ``SUCCESS | BREAK`` or ``FAIL | BREAK``; ``SKIP | BREAK`` when
    the executable is missing or the context carries any of ``skip_when``.
    """
    if not is_executable(argv[0]):
        log.debug("handler.executable_missing", executable=argv[0])
        return Status.SKIP | Status.BREAK

    context.emit_task_start(task)
    if skip_when is not None and context.is_sandboxed(skip_when):
        context.emit_task_finish(Status.SKIP)
        return Status.SKIP | Status.BREAK

    if exec_command(context, argv, env=env) != 0:
        context.emit_task_finish(Status.FAIL)
        return Status.FAIL | Status.BREAK

    context.emit_task_finish(Status.SUCCESS)
    return Status.SUCCESS | Status.BREAK


__all__ = [
    "SPAWN_FAILED",
    "Handler",
    "HandlerAction",
    "exec_command",
    "is_dir",
    "is_executable",
    "run_once",
]
