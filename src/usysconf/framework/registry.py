"""Handler registry.

Manifesto:
    Handlers run in one fixed, hand-curated order. The order encodes the
    dependencies between them (library cache before anything that resolves
    libraries, middleware before its consumers), so the registry is plain
    ordered data and is never reordered or extended at runtime.

Tags:
    usysconf, framework, registry, ordering

Doc-Types:
    api-reference
"""

from __future__ import annotations

from usysconf.core.errors import UnknownTriggerError
from usysconf.handlers import desktop, services, system, systemd
from usysconf.handlers.base import Handler

HANDLERS: tuple[Handler, ...] = (
    system.ldconfig,  # Get library cache in order first
    system.depmod,
    # Middleware
    system.hwdb,
    # Very likely that driver installs invalidated the cache for lib dirs
    system.ldconfig,
    systemd.sysusers,
    systemd.tmpfiles,
    systemd.systemd_reload,
    systemd.systemd_reexec,
    systemd.systemd_sockets,  # Needs daemon-reload first
    # Enter userspace
    desktop.glib2,
    desktop.glib2_gio,
    desktop.fonts,
    desktop.mime,
    desktop.icon_cache,
    desktop.desktop_files,
    desktop.gdk_pixbuf,
    desktop.dconf,
    # GTK immodules
    desktop.gtk2_immodules,
    desktop.gtk3_immodules,
    # Special cases
    services.mandb,
    services.ssl_certs,
    services.sshd,
)


def get_handlers(
    name: str | None = None,
    registry: tuple[Handler, ...] = HANDLERS,
) -> list[Handler]:
    """
    Handlers selected for a run, in registry order.

    A name selects every registry entry carrying it (a handler may appear
    more than once).

    Raises:
        UnknownTriggerError: no entry carries ``name``
    """
    if name is None:
        return list(registry)
    selected = [handler for handler in registry if handler.name == name]
    if not selected:
        raise UnknownTriggerError(name)
    return selected


def list_handlers(registry: tuple[Handler, ...] = HANDLERS) -> list[Handler]:
    """Registry entries in order, each handler once."""
    seen: set[str] = set()
    result = []
    for handler in registry:
        if handler.name not in seen:
            seen.add(handler.name)
            result.append(handler)
    return result


def handler_names(registry: tuple[Handler, ...] = HANDLERS) -> list[str]:
    return [handler.name for handler in list_handlers(registry)]
