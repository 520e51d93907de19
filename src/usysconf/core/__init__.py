"""usysconf core -- primitives shared by the dispatch engine and handlers.

Architecture::

    errors.py        Structured error hierarchy (UsysconfError, StateError)
    logging.py       structlog configuration and context binding
    settings.py      Environment-driven settings (pydantic-settings)
    hashing.py       Deterministic hashing and path fingerprints
    status.py        Handler status flags
    environment.py   chroot / live medium / container probes
    context.py       Run context (flags, skip set, task output)
    state.py         Persistent path fingerprint tracker
"""

from usysconf.core.context import Context, ContextFlag
from usysconf.core.errors import UsysconfError
from usysconf.core.state import StateTracker
from usysconf.core.status import Status

__all__ = [
    "Context",
    "ContextFlag",
    "StateTracker",
    "Status",
    "UsysconfError",
]
