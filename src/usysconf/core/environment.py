"""Environment probing: chroot, live medium and container detection.

Each probe takes the paths it inspects as keyword arguments so tests can
point them at a scratch tree.  Probes are run once, when a ``Context`` is
built from the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence

from usysconf.core.errors import EnvironmentDetectionError
from usysconf.core.logging import get_logger

log = get_logger(__name__)

LIVE_MEDIUM_MARKER = "/run/initramfs/livedev"

CONTAINER_MARKERS = (
    "/run/systemd/container",
    "/.dockerenv",
    "/run/.containerenv",
)


MOUNTS_TABLE = "/proc/mounts"
OVERLAY_ROOT = "overlay / overlay"


def is_chrooted(
    root: str = "/",
    init_root: str = "/proc/1/root",
    mounts: str = MOUNTS_TABLE,
) -> bool:
    """Detect if the current process is running in a chroot.

    If PID 1's root cannot be inspected we assume a chroot, since that is
    what happens inside most build roots without /proc access.  An overlayfs
    mounted on ``/`` also counts as a chroot.  Otherwise the device and inode
    of ``root`` are compared with PID 1's root.
    """
    try:
        init_st = os.stat(init_root)
    except OSError as e:
        log.warning("environment.init_root_unavailable", path=init_root, reason=str(e))
        return True

    try:
        with open(mounts, encoding="utf-8", errors="replace") as fh:
            table = fh.read()
    except OSError as e:
        log.warning("environment.mounts_unavailable", path=mounts, reason=str(e))
    else:
        if OVERLAY_ROOT in table:
            log.debug("environment.overlay_root_detected", path=mounts)
            return True

    try:
        root_st = os.stat(root)
    except OSError as e:
        raise EnvironmentDetectionError(f"Failed to access '{root}'", cause=e) from e

    return (root_st.st_dev, root_st.st_ino) != (init_st.st_dev, init_st.st_ino)


def is_live_medium(marker: str = LIVE_MEDIUM_MARKER) -> bool:
    """Detect if this process runs from a live install medium."""
    try:
        os.stat(marker)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise EnvironmentDetectionError("Could not check for live session", cause=e) from e
    log.debug("environment.live_medium_detected", marker=marker)
    return True


def is_container(
    markers: Sequence[str] = CONTAINER_MARKERS,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Detect if this process runs inside a container."""
    env = os.environ if environ is None else environ
    if env.get("container"):
        log.debug("environment.container_detected", source="env", value=env["container"])
        return True
    for marker in markers:
        if os.path.exists(marker):
            log.debug("environment.container_detected", source="marker", marker=marker)
            return True
    return False
