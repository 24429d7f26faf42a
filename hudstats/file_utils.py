"""Small filesystem and process helpers used across the package."""

from __future__ import annotations

import enum
import logging
import os
import stat
from collections.abc import Iterable

log = logging.getLogger(__name__)


class LsFlags(enum.IntFlag):
    """Which kinds of directory entries :func:`ls` reports."""

    DIRS = 0x01
    FILES = 0x02


def read_line(filename: str) -> str:
    """Return the first line of a file without its newline, or "" if unreadable."""
    try:
        with open(filename, encoding="utf-8", errors="surrogateescape") as fh:
            return fh.readline().rstrip("\n")
    except OSError:
        return ""


def get_basename(path: str) -> str:
    """Return the last path component, splitting on '/' or '\\'.

    A path that ends in a separator is returned unchanged.
    """
    n = max(path.rfind("/"), path.rfind("\\"))
    if n == -1:
        return path
    if n < len(path) - 1:
        return path[n + 1 :]
    return path


def ls(root: str, prefix: str | None = None, flags: LsFlags = LsFlags.DIRS) -> list[str]:
    """List entry names in ``root`` matching ``prefix`` and the kinds in ``flags``.

    Symbolic links are followed; broken links are skipped.
    """
    result: list[str] = []
    try:
        entries = list(os.scandir(root))
    except OSError as exc:
        log.error("Error opening directory '%s': %s", root, exc.strerror)
        return result

    for entry in entries:
        name = entry.name
        if prefix and not name.startswith(prefix):
            continue
        if name in (".", ".."):
            continue
        try:
            if entry.is_symlink():
                mode = os.stat(entry.path).st_mode
                is_dir = stat.S_ISDIR(mode)
                is_file = stat.S_ISREG(mode)
            else:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
        except OSError:
            continue
        if (flags & LsFlags.DIRS and is_dir) or (flags & LsFlags.FILES and is_file):
            result.append(name)
    return result


def file_exists(path: str) -> bool:
    """True if ``path`` exists and is not a directory."""
    try:
        return not stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False


def dir_exists(path: str) -> bool:
    """True if ``path`` exists and is a directory."""
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False


def read_symlink(link: str) -> str:
    """Return the target of a symbolic link, or "" if it cannot be read."""
    try:
        return os.readlink(link)
    except (OSError, ValueError):
        return ""


def get_exe_path() -> str:
    """Path of the running executable."""
    return read_symlink("/proc/self/exe")


def _ends_with_exe(text: str) -> bool:
    return text.lower().endswith(".exe")


def _strip_ext(text: str, keep_ext: bool) -> str:
    if keep_ext:
        return text
    dot = text.rfind(".")
    return text if dot == -1 else text[:dot]


def _wine_exe_name(exe_path: str, comm: str, cmdline: Iterable[str], keep_ext: bool) -> str:
    if not (exe_path.endswith("wine-preloader") or exe_path.endswith("wine64-preloader")):
        return ""

    if _ends_with_exe(comm):
        return _strip_ext(comm, keep_ext)

    for arg in cmdline:
        n = max(arg.rfind("/"), arg.rfind("\\"))
        if arg and n != -1 and n < len(arg) - 1:
            if keep_ext:
                return arg[n + 1 :]
            dot = arg.rfind(".")
            if dot == -1 or dot < n:
                dot = len(arg)
            return arg[n + 1 : dot]
        if _ends_with_exe(arg):
            return _strip_ext(arg, keep_ext)
    return ""


def _read_cmdline() -> list[str]:
    try:
        with open("/proc/self/cmdline", "rb") as fh:
            raw = fh.read()
    except OSError:
        return []
    return raw.decode("utf-8", errors="surrogateescape").split("\0")


def get_wine_exe_name(keep_ext: bool = False) -> str:
    """Name of the Windows executable when running under a wine preloader, else ""."""
    exe_path = get_exe_path()
    if not (exe_path.endswith("wine-preloader") or exe_path.endswith("wine64-preloader")):
        return ""
    return _wine_exe_name(exe_path, read_line("/proc/self/comm"), _read_cmdline(), keep_ext)


def get_home_dir() -> str:
    """Value of HOME, or "" if unset."""
    return os.environ.get("HOME", "")


def get_data_dir() -> str:
    """XDG data directory, falling back to ~/.local/share."""
    value = os.environ.get("XDG_DATA_HOME")
    if value is not None:
        return value
    home = get_home_dir()
    return home + "/.local/share" if home else home


def get_config_dir() -> str:
    """XDG config directory, falling back to ~/.config."""
    value = os.environ.get("XDG_CONFIG_HOME")
    if value is not None:
        return value
    home = get_home_dir()
    return home + "/.config" if home else home