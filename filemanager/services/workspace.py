# filemanager/services/workspace.py
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from filemanager.errors import NotFoundError, PathEscapeError

logger = logging.getLogger(__name__)

# Tokens the UI sends instead of a literal path for common home folders.
SHORTCUTS = {
    "DESKTOP": "Desktop",
    "DOCUMENTS": "Documents",
    "DOWNLOADS": "Downloads",
}


def expand_shortcut(value: str) -> str:
    sub = SHORTCUTS.get(value.strip())
    if sub is None:
        return value
    return str(Path.home() / sub)


def is_within(path: Path, root: Path) -> bool:
    """Segment-wise containment: /tmp/ws does not contain /tmp/ws-other."""
    return path.is_relative_to(root)


def resolve_in_root(root: Path, fragment: Optional[str], *, allow_root: bool = True) -> Path:
    """
    Resolve `fragment` against `root` and make sure it stays inside.
    Resolution follows symlinks, so a link pointing out of the root is an escape too.
    """
    root = root.resolve()
    p = (root / (fragment or "")).resolve()
    if not is_within(p, root):
        raise PathEscapeError(str(fragment), str(root))
    if not allow_root and p == root:
        raise PathEscapeError(str(fragment), str(root))
    return p


class Workspace:
    """
    Current working root plus the set of roots the user has admitted.

    `lock` serialises root changes against the resolve-then-act sequence
    of file operations.
    """

    def __init__(self, default_root: Path, extra_roots: Iterable[Path] = ()):
        self.default_root = Path(default_root).expanduser().resolve()
        self._root = self.default_root
        self._allowed: List[Path] = []
        self.lock = threading.RLock()
        self._seed_roots(extra_roots)

    def _seed_roots(self, extra_roots: Iterable[Path]):
        home = Path.home()
        for candidate in (home, home / "Desktop", home / "Documents", home / "Downloads", Path.cwd(),
                          *extra_roots):
            if candidate.is_dir():
                self._admit(candidate.resolve())
        # Created on demand, so it need not exist yet.
        self._admit(self.default_root)

    def _admit(self, path: Path):
        if path not in self._allowed:
            self._allowed.append(path)

    # ---------- Public API ----------

    @property
    def root(self) -> Path:
        return self._root

    def get_working_directory(self) -> Path:
        return self._root

    def allowed_roots(self) -> List[Path]:
        with self.lock:
            return list(self._allowed)

    def list_allowed_roots(self) -> List[str]:
        return [str(p) for p in self.allowed_roots()]

    def ensure_root(self) -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root

    def add_allowed_root(self, path: str | Path) -> bool:
        p = Path(path).expanduser().resolve()
        if not p.is_dir():
            return False
        with self.lock:
            self._admit(p)
        return True

    def set_working_directory(self, path: str | Path) -> Path:
        p = Path(path).expanduser()
        if not p.exists():
            raise NotFoundError(str(path), "Directory")
        if not p.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {path}")

        resolved = p.resolve()
        with self.lock:
            if not any(is_within(resolved, r) for r in self._allowed):
                logger.info("admitting new root %s", resolved)
                self._admit(resolved)
            self._root = resolved
        logger.info("working directory set to %s", resolved)
        return resolved

    def resolve(self, fragment: Optional[str], *, allow_root: bool = True) -> Path:
        return resolve_in_root(self._root, fragment, allow_root=allow_root)
