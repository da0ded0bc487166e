"""Filesystem path helpers for navigation paths supplied by clients.

Navigation paths (the ``p`` query parameter) are POSIX-style and relative to
the serve root. Every path handed to the filesystem goes through
``resolve_within`` so that ``..`` segments and symlinks cannot leave the root.
"""

import posixpath
import re
from pathlib import Path

from fastapi import Request


DEFAULT_NAV_PATH = "."
TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


class PathEscapeError(ValueError):
    """Raised when a navigation path resolves outside its root."""


class InvalidPathError(ValueError):
    """Raised for navigation paths no filesystem call accepts (embedded NUL)."""


def nav_join(base: str, name: str) -> str:
    """Join and clean two navigation path segments: ``nav_join(".", "a") == "a"``."""
    return posixpath.normpath(posixpath.join(base, name))


def resolve_within(root: Path, rel: str) -> Path:
    """Resolve ``rel`` against ``root`` and require the result to stay inside it.

    Leading separators are ignored, so ``/etc`` means ``<root>/etc``.
    Raises InvalidPathError for paths with a NUL byte, PathEscapeError on
    escape and OSError/RuntimeError when the path cannot be resolved (e.g. a
    symlink loop).
    """
    if "\x00" in rel:
        raise InvalidPathError(f"Embedded NUL in {rel!r}")
    base = root.resolve()
    candidate = (base / rel.lstrip("/\\")).resolve()
    if not candidate.is_relative_to(base):
        raise PathEscapeError(f"{rel!r} resolves outside {base}")
    return candidate


def upload_basename(filename: str) -> str:
    """Last component of a client-declared filename, either separator style.

    Raises ValueError when nothing usable remains.
    """
    name = re.split(r"[\\/]", filename)[-1]
    if name in {"", ".", ".."} or "\x00" in name:
        raise ValueError(f"Unusable upload filename: {filename!r}")
    return name


def get_nav_path(request: Request) -> str:
    """First ``p`` query value, or ``.`` when absent or empty."""
    values = request.query_params.getlist("p")
    if not values or not values[0]:
        return DEFAULT_NAV_PATH
    return values[0]
