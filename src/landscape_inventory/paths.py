from __future__ import annotations

import os

from .logging import get_logger

log = get_logger("paths")

DEFAULT_STORE_FOLDER = "inventory"
DEFAULT_STORE_FILENAME = "documents.sqlite3"


def expand_abs(path: str) -> str:
    """Expand env vars and ~ then return absolute path."""
    return os.path.abspath(os.path.expanduser(os.path.expandvars(path or "")))


def find_project_root(start_dir: str | None = None) -> str:
    """Find the project root by walking upward from start_dir.

    Looks for .git/, pyproject.toml, .env or README.md.
    Falls back to absolute(start_dir) if nothing found.
    """
    start = os.path.abspath(start_dir or os.getcwd() or ".")
    d = start
    while True:
        if os.path.isdir(os.path.join(d, ".git")):
            return d
        for marker in ("pyproject.toml", ".env", "README.md"):
            if os.path.isfile(os.path.join(d, marker)):
                return d
        parent = os.path.dirname(d)
        if parent == d:
            log.debug(f"No project marker above {start}; using it as root")
            return start
        d = parent


def var_dir(root_dir: str) -> str:
    """Return the absolute var directory under the project root."""
    return os.path.join(os.path.abspath(root_dir), "var")


def default_store_path(root_dir: str | None = None) -> str:
    """Return `<root>/var/inventory/documents.sqlite3` (folder not created)."""
    root = find_project_root(root_dir)
    return os.path.join(var_dir(root), DEFAULT_STORE_FOLDER, DEFAULT_STORE_FILENAME)
