"""Handler status flags.

A handler action returns a combination of these flags.  ``SUCCESS``,
``FAIL`` and ``SKIP`` describe the outcome for the matched path; ``BREAK``
and ``DROP`` steer the dispatcher for the rest of the current glob pass.

    SUCCESS | BREAK          ran once, treat remaining matches as done
    BREAK                    nothing to record here, but remaining matches are done
    SKIP | BREAK             precondition failed globally, stop, record nothing
    FAIL | BREAK             failed, stop attempting further matches
    SUCCESS | BREAK | DROP   ran once, stop, but never persist fingerprints
"""

from enum import Flag, auto


class Status(Flag):
    """Outcome of one handler invocation."""

    SUCCESS = auto()
    FAIL = auto()
    SKIP = auto()
    BREAK = auto()
    DROP = auto()

    @property
    def recordable(self) -> bool:
        """Whether a path handled with this status gets its fingerprint persisted."""
        if Status.SUCCESS not in self:
            return False
        return not self & (Status.FAIL | Status.SKIP | Status.DROP)

    @property
    def records_remaining(self) -> bool:
        """Whether the matches left after this BREAK count as handled and get persisted."""
        if Status.BREAK not in self:
            return False
        return not self & (Status.FAIL | Status.SKIP | Status.DROP)

    @property
    def outcome(self) -> str:
        """Short label for logs and console output."""
        if Status.FAIL in self:
            return "failed"
        if Status.SKIP in self:
            return "skipped"
        if Status.SUCCESS in self:
            return "success"
        return "unknown"
