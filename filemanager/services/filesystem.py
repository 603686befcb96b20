# filemanager/services/filesystem.py
from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Literal, Optional

from filemanager.errors import NotFoundError
from filemanager.logging import log_action
from filemanager.services.workspace import Workspace

logger = logging.getLogger(__name__)

EntryType = Literal["file", "folder"]


@dataclass(frozen=True)
class FileEntry:
    name: str
    type: EntryType
    path: str        # relative to the working root, POSIX separators
    full_path: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type, "path": self.path, "fullPath": self.full_path}


def _entry_type(p: Path) -> EntryType:
    return "folder" if p.is_dir() else "file"


def _sort_key(e: FileEntry):
    return (e.type != "folder", e.name.lower())


class FileOperationsService:
    """
    Sandbox all file operations inside the workspace's current root.
    Every path is resolved through the workspace before anything touches disk.
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def _rel(self, p: Path) -> str:
        return p.relative_to(self.workspace.root).as_posix()

    # ---------- Mutations ----------

    def create_file(self, rel_path: str, content: str = "") -> str:
        with self.workspace.lock:
            p = self.workspace.resolve(rel_path)
            log_action(logger, "create_file", {"path": str(p), "bytes": len(content.encode("utf-8"))})
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(content, encoding="utf-8")
        return str(p)

    def create_folder(self, rel_path: str) -> str:
        with self.workspace.lock:
            p = self.workspace.resolve(rel_path)
            log_action(logger, "create_folder", {"path": str(p)})
            p.mkdir(parents=True, exist_ok=True)
        return str(p)

    def delete_item(self, rel_path: str) -> str:
        """Remove a file or a whole tree. A missing target is a no-op."""
        with self.workspace.lock:
            p = self.workspace.resolve(rel_path, allow_root=False)
            log_action(logger, "delete", {"path": str(p)})
            if p.is_dir():
                shutil.rmtree(p)
            elif p.exists():
                p.unlink()
            else:
                logger.debug("delete: nothing at %s", p)
        return str(p)

    def create_structure(self, structure: Dict[str, Any], base_path: str = "") -> List[Dict[str, str]]:
        """
        Materialise a nested name -> (dict | content) mapping, pre-order.
        No rollback: if an entry fails, everything created before it stays on disk.
        """
        results: List[Dict[str, str]] = []
        for name, value in structure.items():
            item_path = PurePosixPath(base_path, name).as_posix() if base_path else name
            if isinstance(value, dict):
                self.create_folder(item_path)
                results.append({"type": "folder", "path": item_path})
                results.extend(self.create_structure(value, item_path))
            else:
                self.create_file(item_path, value if isinstance(value, str) else "")
                results.append({"type": "file", "path": item_path})
        return results

    # ---------- Reads ----------

    def list_directory(self, rel_path: Optional[str] = "") -> List[FileEntry]:
        with self.workspace.lock:
            p = self.workspace.resolve(rel_path)
            if not p.exists():
                return []
            if not p.is_dir():
                raise NotADirectoryError(f"Path is not a directory: {rel_path}")
            base = PurePosixPath(self._rel(p))
            entries = [
                FileEntry(child.name, _entry_type(child), (base / child.name).as_posix(), str(child))
                for child in p.iterdir()
            ]
        return sorted(entries, key=_sort_key)

    def get_file_content(self, rel_path: str) -> str:
        with self.workspace.lock:
            p = self.workspace.resolve(rel_path)
            if not p.exists():
                raise NotFoundError(rel_path, "File")
            if p.is_dir():
                raise IsADirectoryError(f"Path is a directory: {rel_path}")
            return p.read_text(encoding="utf-8")

    def explore_directory(self, abs_path: str) -> List[FileEntry]:
        """List any existing directory (used by the directory picker, not sandboxed)."""
        p = Path(abs_path).expanduser().resolve()
        if not p.exists():
            raise NotFoundError(abs_path, "Directory")
        if not p.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {abs_path}")
        entries = [FileEntry(child.name, _entry_type(child), child.name, str(child)) for child in p.iterdir()]
        return sorted(entries, key=_sort_key)
