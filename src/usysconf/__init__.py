"""
usysconf - post-install trigger runner.

After packages change files under well-known system directories, usysconf
works out which maintenance actions have to re-run (library cache, icon
caches, font cache, systemd reloads, ...) and runs exactly those, skipping
work already done for unchanged inputs.

- usysconf.core: errors, logging, settings, status flags, context, state
- usysconf.framework: handler registry, dispatch engine, failure reporting
- usysconf.handlers: built-in handlers
- usysconf.cli: typer application
"""

__version__ = "0.5.0"
