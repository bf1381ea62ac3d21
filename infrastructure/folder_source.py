"""Local file-system access for folder imports."""

from __future__ import annotations

from collections.abc import Iterator
import os

from loguru import logger

# Directories presented as single files by desktop shells; never descended into
PACKAGE_SUFFIXES = (
    ".app",
    ".bundle",
    ".framework",
    ".photoslibrary",
    ".aplibrary",
    ".pkg",
    ".plugin",
)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _is_package(name: str) -> bool:
    return name.lower().endswith(PACKAGE_SUFFIXES)


class LocalFolderSource:
    """Walks folders with `os.walk`, skipping hidden entries and packages.

    Local file systems have no sandbox grants, so scoped access is acquired
    by probing that the folder can be listed; release only ends the scope.
    """

    def __init__(self) -> None:
        self._scopes: set[str] = set()

    def enumerate(self, root: str) -> Iterator[str]:
        def on_error(ex: OSError) -> None:
            logger.warning("Cannot list {}: {}", ex.filename, ex)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            dirnames[:] = sorted(d for d in dirnames if not _is_hidden(d) and not _is_package(d))
            for name in sorted(filenames):
                if _is_hidden(name):
                    continue
                path = os.path.join(dirpath, name)
                if os.path.isfile(path):
                    yield path

    def read_file(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def is_readable(self, path: str) -> bool:
        return os.path.isdir(path) and os.access(path, os.R_OK | os.X_OK)

    def acquire_scoped_access(self, path: str) -> bool:
        try:
            with os.scandir(path) as it:
                next(it, None)
        except OSError as ex:
            logger.warning("Scoped access refused for {}: {}", path, ex)
            return False
        self._scopes.add(os.path.abspath(path))
        return True

    def release_scoped_access(self, path: str) -> None:
        self._scopes.discard(os.path.abspath(path))

    def holds_scope(self, path: str) -> bool:
        return os.path.abspath(path) in self._scopes
