"""Low-level system handlers: library cache, kernel modules, hardware db."""

from __future__ import annotations

import os

from usysconf.core.context import Context
from usysconf.core.status import Status
from usysconf.handlers.base import Handler, exec_command, is_dir, is_executable, run_once

LDCONFIG = "/usr/sbin/ldconfig"
DEPMOD = "/usr/sbin/depmod"
SYSTEMD_HWDB = "/usr/bin/systemd-hwdb"


def _ldconfig(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating dynamic library cache", [LDCONFIG, "-X"])


def _depmod(ctx: Context, path: str) -> Status:
    # One invocation per installed kernel tree.
    if not is_executable(DEPMOD):
        return Status.SKIP | Status.BREAK
    if not is_dir(path) or not os.path.exists(os.path.join(path, "modules.order")):
        return Status.SKIP

    version = os.path.basename(path)
    ctx.emit_task_start(f"Running depmod on kernel {version}")
    if exec_command(ctx, [DEPMOD, "-a", version]) != 0:
        ctx.emit_task_finish(Status.FAIL)
        return Status.FAIL
    ctx.emit_task_finish(Status.SUCCESS)
    return Status.SUCCESS


def _hwdb(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating hwdb", [SYSTEMD_HWDB, "update"])


ldconfig = Handler(
    name="ldconfig",
    description="Update dynamic library cache",
    required_executable=LDCONFIG,
    action=_ldconfig,
    # BREAK is per pattern: on a cold run with every pattern stale this spawns
    # ldconfig once per pattern. Later runs only spawn it for changed patterns.
    glob_patterns=(
        "/usr/lib64",
        "/usr/lib32",
        "/usr/lib",
        "/usr/local/lib64",
        "/usr/local/lib",
        "/etc/ld.so.conf",
        "/etc/ld.so.conf.d/*.conf",
    ),
)

depmod = Handler(
    name="depmod",
    description="Update kernel module dependencies",
    required_executable=DEPMOD,
    action=_depmod,
    glob_patterns=("/usr/lib/modules/*",),
)

hwdb = Handler(
    name="hwdb",
    description="Update hardware database",
    required_executable=SYSTEMD_HWDB,
    action=_hwdb,
    glob_patterns=(
        "/usr/lib/udev/hwdb.d/*.hwdb",
        "/etc/udev/hwdb.d/*.hwdb",
    ),
)
