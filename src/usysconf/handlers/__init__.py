"""Built-in handlers.

Handler modules only define descriptors; their run order lives in
``usysconf.framework.registry``.
"""

from usysconf.handlers.base import Handler, HandlerAction, exec_command, run_once

__all__ = ["Handler", "HandlerAction", "exec_command", "run_once"]
