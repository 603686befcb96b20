# filemanager/services/actions.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from filemanager.logging import log_action
from filemanager.services.filesystem import FileOperationsService

logger = logging.getLogger(__name__)


def _targets(action: Dict[str, Any]) -> List[str]:
    targets = action.get("targets") or []
    if isinstance(targets, str):
        return [targets]
    return list(targets)


class ActionExecutor:
    """
    Execute a model-proposed action against the file operations service.
    Arguments are not validated beyond what each file operation enforces.
    """

    def __init__(self, file_ops: FileOperationsService):
        self.file_ops = file_ops
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "create_file": self._create_file,
            "create_folder": self._create_folder,
            "delete": self._delete,
            "create_structure": self._create_structure,
            "list": self._list,
        }

    def execute(self, action: Dict[str, Any]) -> Dict[str, Any]:
        operation = action.get("operation")
        handler = self._handlers.get(operation or "")
        if handler is None:
            raise ValueError(f"Unsupported operation: {operation}")
        log_action(logger, f"chat:{operation}", {k: v for k, v in action.items() if k != "structure"})
        return handler(action)

    # ---- Handlers

    def _create_file(self, action: Dict[str, Any]) -> Dict[str, Any]:
        targets = _targets(action)
        if not targets:
            raise ValueError("No file path specified")
        content = action.get("content")
        if content is None:
            content = ""
        elif not isinstance(content, str):
            raise ValueError("File content must be a string")
        path = self.file_ops.create_file(targets[0], content)
        return {"message": f"File created successfully: {path}", "path": path}

    def _create_folder(self, action: Dict[str, Any]) -> Dict[str, Any]:
        targets = _targets(action)
        if not targets:
            raise ValueError("No folder path specified")
        path = self.file_ops.create_folder(targets[0])
        return {"message": f"Folder created successfully: {path}", "path": path}

    def _delete(self, action: Dict[str, Any]) -> Dict[str, Any]:
        targets = _targets(action)
        if not targets:
            raise ValueError("No targets specified for deletion")
        deleted = []
        for target in targets:
            self.file_ops.delete_item(target)
            deleted.append(target)
        return {"message": f"Successfully deleted: {', '.join(deleted)}", "deleted": deleted}

    def _create_structure(self, action: Dict[str, Any]) -> Dict[str, Any]:
        structure = action.get("structure")
        if not structure or not isinstance(structure, dict):
            raise ValueError("No structure specified")
        created = self.file_ops.create_structure(structure, action.get("basePath") or "")
        location = str(self.file_ops.workspace.root)
        return {
            "message": f"Project structure created with {len(created)} items in {location}",
            "created": created,
            "location": location,
        }

    def _list(self, action: Dict[str, Any]) -> Dict[str, Any]:
        targets = _targets(action)
        rel = targets[0] if targets else ""
        items = self.file_ops.list_directory(rel)
        return {
            "message": f"Found {len(items)} items in {rel or 'current directory'}",
            "items": [e.to_dict() for e in items],
        }
