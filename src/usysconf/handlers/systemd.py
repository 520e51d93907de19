"""systemd handlers.

Reload, re-exec and socket restarts talk to the running manager, so they
are skipped whenever there is no booted systemd to talk to (chroot, live
medium or container).
"""

from __future__ import annotations

import os

from usysconf.core.context import SANDBOXED, Context, ContextFlag
from usysconf.core.status import Status
from usysconf.handlers.base import Handler, run_once

SYSTEMCTL = "/usr/bin/systemctl"
SYSTEMD_SYSUSERS = "/usr/bin/systemd-sysusers"
SYSTEMD_TMPFILES = "/usr/bin/systemd-tmpfiles"

SYSTEMD_UNIT_DIR = "/usr/lib/systemd/system"
SYSTEMD_UTIL_DIR = "/usr/lib/systemd"


def _sysusers(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating system users", [SYSTEMD_SYSUSERS])


def _tmpfiles(ctx: Context, path: str) -> Status:
    return run_once(
        ctx,
        "Updating tmpfiles",
        [SYSTEMD_TMPFILES, "--create"],
        skip_when=ContextFlag.CHROOTED | ContextFlag.LIVE_MEDIUM,
    )


def _reload(ctx: Context, path: str) -> Status:
    status = run_once(
        ctx,
        "Reloading systemd configuration",
        [SYSTEMCTL, "daemon-reload"],
        skip_when=SANDBOXED,
    )
    if Status.FAIL in status:
        # sockets.target restarts assume the manager saw the new units
        ctx.push_skip(systemd_sockets.name)
    return status


def _reexec(ctx: Context, path: str) -> Status:
    if not os.access(path, os.X_OK):
        return Status.SKIP
    return run_once(ctx, "Re-executing systemd", [SYSTEMCTL, "daemon-reexec"], skip_when=SANDBOXED)


def _sockets(ctx: Context, path: str) -> Status:
    return run_once(
        ctx,
        "Re-starting vendor-enabled .socket units",
        [SYSTEMCTL, "restart", "sockets.target"],
        skip_when=ContextFlag.CHROOTED | ContextFlag.LIVE_MEDIUM,
    )


sysusers = Handler(
    name="sysusers",
    description="Update systemd sysusers",
    required_executable=SYSTEMD_SYSUSERS,
    action=_sysusers,
    glob_patterns=("/usr/lib/sysusers.d/*.conf",),
)

tmpfiles = Handler(
    name="tmpfiles",
    description="Update systemd tmpfiles",
    required_executable=SYSTEMD_TMPFILES,
    action=_tmpfiles,
    glob_patterns=("/usr/lib/tmpfiles.d/*.conf",),
)

systemd_reload = Handler(
    name="systemd-reload",
    description="Reload systemd configuration",
    required_executable=SYSTEMCTL,
    action=_reload,
    glob_patterns=(
        f"{SYSTEMD_UNIT_DIR}/*",
        "/usr/lib/systemd/user/*",
        "/etc/systemd/system/*",
    ),
)

systemd_reexec = Handler(
    name="systemd-reexec",
    description="Re-execute systemd",
    required_executable=SYSTEMCTL,
    action=_reexec,
    glob_patterns=(f"{SYSTEMD_UTIL_DIR}/systemd",),
)

systemd_sockets = Handler(
    name="systemd-sockets",
    description="Re-start systemd sockets.target",
    required_executable=SYSTEMCTL,
    action=_sockets,
    glob_patterns=(f"{SYSTEMD_UNIT_DIR}/sockets.target.wants",),
)
