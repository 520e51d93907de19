"""Userspace desktop handlers: GLib, fonts, MIME, icons, GTK caches."""

from __future__ import annotations

import os

from usysconf.core.context import Context
from usysconf.core.status import Status
from usysconf.handlers.base import Handler, exec_command, is_dir, is_executable, run_once

GLIB_COMPILE_SCHEMAS = "/usr/bin/glib-compile-schemas"
GIO_QUERYMODULES = "/usr/bin/gio-querymodules"
FC_CACHE = "/usr/bin/fc-cache"
UPDATE_MIME_DATABASE = "/usr/bin/update-mime-database"
GTK_UPDATE_ICON_CACHE = "/usr/bin/gtk-update-icon-cache"
UPDATE_DESKTOP_DATABASE = "/usr/bin/update-desktop-database"
GDK_PIXBUF_QUERY_LOADERS = "/usr/bin/gdk-pixbuf-query-loaders"
DCONF = "/usr/bin/dconf"
GTK2_QUERY_IMMODULES = "/usr/bin/gtk-query-immodules-2.0"
GTK3_QUERY_IMMODULES = "/usr/bin/gtk-query-immodules-3.0"

MIME_DIR = "/usr/share/mime"


def _glib2(ctx: Context, path: str) -> Status:
    if not is_dir(path):
        return Status.SKIP
    return run_once(ctx, "Compiling glib-schemas", [GLIB_COMPILE_SCHEMAS, path])


def _gio(ctx: Context, path: str) -> Status:
    if not is_dir(path):
        return Status.SKIP
    return run_once(ctx, "Creating GIO modules cache", [GIO_QUERYMODULES, path])


def _fonts(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Rebuilding font cache", [FC_CACHE, "-f"])


def _mime(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating MIME database", [UPDATE_MIME_DATABASE, MIME_DIR])


def _icon_cache(ctx: Context, path: str) -> Status:
    # Each theme directory owns its own cache.
    if not is_executable(GTK_UPDATE_ICON_CACHE):
        return Status.SKIP | Status.BREAK
    if not is_dir(path) or not os.path.exists(os.path.join(path, "index.theme")):
        return Status.SKIP

    ctx.emit_task_start(f"Updating icon theme cache: {os.path.basename(path)}")
    if exec_command(ctx, [GTK_UPDATE_ICON_CACHE, "-ftq", path]) != 0:
        ctx.emit_task_finish(Status.FAIL)
        return Status.FAIL
    ctx.emit_task_finish(Status.SUCCESS)
    return Status.SUCCESS


def _desktop_files(ctx: Context, path: str) -> Status:
    if not is_dir(path):
        return Status.SKIP
    return run_once(ctx, "Updating desktop database", [UPDATE_DESKTOP_DATABASE, "-q", path])


def _gdk_pixbuf(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Compiling gdk-pixbuf cache", [GDK_PIXBUF_QUERY_LOADERS, "--update-cache"])


def _dconf(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating dconf database", [DCONF, "update"])


def _gtk2_immodules(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating GTK2 input module cache", [GTK2_QUERY_IMMODULES, "--update-cache"])


def _gtk3_immodules(ctx: Context, path: str) -> Status:
    return run_once(ctx, "Updating GTK3 input module cache", [GTK3_QUERY_IMMODULES, "--update-cache"])


glib2 = Handler(
    name="glib2",
    description="Compile glib-schemas",
    required_executable=GLIB_COMPILE_SCHEMAS,
    action=_glib2,
    glob_patterns=("/usr/share/glib-2.0/schemas",),
)

glib2_gio = Handler(
    name="glib2-gio",
    description="Create glib2 GIO modules cache",
    required_executable=GIO_QUERYMODULES,
    action=_gio,
    glob_patterns=("/usr/lib64/gio/modules",),
)

fonts = Handler(
    name="fonts",
    description="Rebuild font cache",
    required_executable=FC_CACHE,
    action=_fonts,
    glob_patterns=(
        "/usr/share/fonts/*",
        "/usr/share/fonts",
    ),
)

mime = Handler(
    name="mime",
    description="Update MIME database",
    required_executable=UPDATE_MIME_DATABASE,
    action=_mime,
    glob_patterns=(f"{MIME_DIR}/packages/*.xml",),
)

icon_cache = Handler(
    name="icon-cache",
    description="Rebuild icon theme caches",
    required_executable=GTK_UPDATE_ICON_CACHE,
    action=_icon_cache,
    glob_patterns=("/usr/share/icons/*",),
)

desktop_files = Handler(
    name="desktop-files",
    description="Update desktop database",
    required_executable=UPDATE_DESKTOP_DATABASE,
    action=_desktop_files,
    glob_patterns=("/usr/share/applications",),
)

gdk_pixbuf = Handler(
    name="gdk-pixbuf",
    description="Compile gdk-pixbuf loader cache",
    required_executable=GDK_PIXBUF_QUERY_LOADERS,
    action=_gdk_pixbuf,
    glob_patterns=("/usr/lib64/gdk-pixbuf-2.0/2.10.0/loaders",),
)

dconf = Handler(
    name="dconf",
    description="Compile dconf database",
    required_executable=DCONF,
    action=_dconf,
    glob_patterns=("/etc/dconf/db/*.d",),
)

gtk2_immodules = Handler(
    name="gtk2-immodules",
    description="Update GTK2 input module cache",
    required_executable=GTK2_QUERY_IMMODULES,
    action=_gtk2_immodules,
    glob_patterns=("/usr/lib64/gtk-2.0/2.10.0/immodules/*.so",),
)

gtk3_immodules = Handler(
    name="gtk3-immodules",
    description="Update GTK3 input module cache",
    required_executable=GTK3_QUERY_IMMODULES,
    action=_gtk3_immodules,
    glob_patterns=("/usr/lib64/gtk-3.0/3.0.0/immodules/*.so",),
)
