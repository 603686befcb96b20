# tests/conftest.py
from pathlib import Path
from typing import List, Union

import pytest

from filemanager.services.filesystem import FileOperationsService
from filemanager.services.workspace import Workspace


class FakeClient:
    """Stands in for GeminiClient: returns queued replies (or raises queued exceptions)."""

    def __init__(self, replies: List[Union[str, Exception]] = ()):
        self.replies = list(replies)
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def snapshot(root: Path) -> dict:
    """Relative path -> file content (None for folders) for everything under root."""
    return {
        p.relative_to(root).as_posix(): (None if p.is_dir() else p.read_bytes())
        for p in sorted(root.rglob("*"))
    }


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    ws = Workspace(tmp_path / "ws")
    ws.ensure_root()
    return ws


@pytest.fixture
def file_ops(workspace: Workspace) -> FileOperationsService:
    return FileOperationsService(workspace)


@pytest.fixture
def tree_snapshot():
    return snapshot


@pytest.fixture
def fake_client():
    """Factory: fake_client("reply", RuntimeError("boom"), ...)."""
    return lambda *replies: FakeClient(list(replies))
