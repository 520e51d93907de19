"""Special cases: manual pages, certificate trust store, SSH host keys."""

from __future__ import annotations

from usysconf.core.context import Context, ContextFlag
from usysconf.core.status import Status
from usysconf.handlers.base import Handler, run_once

MANDB = "/usr/bin/mandb"
UPDATE_CA_TRUST = "/usr/bin/update-ca-trust"
SSH_KEYGEN = "/usr/bin/ssh-keygen"


def _mandb(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating manpages database", [MANDB, "-q"], skip_when=ContextFlag.LIVE_MEDIUM)


def _ssl_certs(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating SSL certificate trust store", [UPDATE_CA_TRUST, "extract"])


def _sshd(ctx: Context, path: str) -> Status:
    status = run_once(
        ctx,
        "Generating missing SSH host keys",
        [SSH_KEYGEN, "-A"],
        skip_when=ContextFlag.CHROOTED | ContextFlag.LIVE_MEDIUM,
    )
    # Host keys are verified on every run, never remembered.
    return status | Status.DROP


mandb = Handler(
    name="mandb",
    description="Update manpages database",
    required_executable=MANDB,
    action=_mandb,
    glob_patterns=(
        "/usr/share/man",
        "/usr/share/man/*",
    ),
)

ssl_certs = Handler(
    name="ssl-certs",
    description="Update SSL certificate trust store",
    required_executable=UPDATE_CA_TRUST,
    action=_ssl_certs,
    glob_patterns=(
        "/usr/share/ca-certificates/*",
        "/etc/ca-certificates/trust-source/*",
    ),
)

sshd = Handler(
    name="sshd",
    description="Generate SSH host keys",
    required_executable=SSH_KEYGEN,
    action=_sshd,
    glob_patterns=("/etc/ssh/sshd_config",),
)
