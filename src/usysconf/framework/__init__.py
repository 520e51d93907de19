"""usysconf framework -- the handler registry and the dispatch engine.

Architecture::

    registry.py      Ordered, immutable handler table
    reporter.py      Run log file and failure dumps
    dispatcher.py    Glob expansion, staleness checks, status interpretation
"""

from usysconf.framework.dispatcher import RunReport, TriggerDispatcher, run_triggers
from usysconf.framework.registry import HANDLERS, get_handlers, list_handlers

__all__ = [
    "HANDLERS",
    "RunReport",
    "TriggerDispatcher",
    "get_handlers",
    "list_handlers",
    "run_triggers",
]
