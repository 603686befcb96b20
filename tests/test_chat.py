# tests/test_chat.py
import json
from pathlib import Path

import pytest

from filemanager.services.actions import ActionExecutor
from filemanager.services.chat import ChatService
from filemanager.services.interpreter import CommandInterpreter


def reply(type_, message, action=None):
    return json.dumps({"type": type_, "message": message, "action": action})


@pytest.fixture
def make_chat(workspace, file_ops, fake_client):
    def _make(*replies):
        client = fake_client(*replies)
        return ChatService(workspace, file_ops, CommandInterpreter(client), ActionExecutor(file_ops)), client
    return _make


# ---- ActionExecutor

def test_executor_dispatch(file_ops, workspace):
    ex = ActionExecutor(file_ops)
    out = ex.execute({"operation": "create_file", "targets": ["a.txt"], "content": "hi"})
    assert out["path"] == str(workspace.root / "a.txt")
    assert (workspace.root / "a.txt").read_text() == "hi"

    ex.execute({"operation": "create_folder", "targets": ["d"]})
    assert (workspace.root / "d").is_dir()

    listed = ex.execute({"operation": "list"})
    assert [i["name"] for i in listed["items"]] == ["d", "a.txt"]
    assert listed["message"] == "Found 2 items in current directory"

    out = ex.execute({"operation": "delete", "targets": ["a.txt", "d"]})
    assert out["deleted"] == ["a.txt", "d"]
    assert list(workspace.root.iterdir()) == []


def test_executor_structure_with_base_path(file_ops, workspace):
    out = ActionExecutor(file_ops).execute({
        "operation": "create_structure",
        "structure": {"src": {"main.py": "print(1)"}},
        "basePath": "proj",
    })
    assert out["created"] == [{"type": "folder", "path": "proj/src"}, {"type": "file", "path": "proj/src/main.py"}]
    assert out["location"] == str(workspace.root)


@pytest.mark.parametrize("action, error", [
    ({"operation": "create_file"}, "No file path specified"),
    ({"operation": "create_folder", "targets": []}, "No folder path specified"),
    ({"operation": "delete"}, "No targets specified for deletion"),
    ({"operation": "create_structure"}, "No structure specified"),
    ({"operation": "rename", "targets": ["a"]}, "Unsupported operation: rename"),
    ({"operation": "create_file", "targets": ["n.txt"], "content": 5}, "File content must be a string"),
])
def test_executor_rejects_incomplete_actions(file_ops, action, error):
    with pytest.raises(ValueError, match=error):
        ActionExecutor(file_ops).execute(action)


# ---- ChatService

def test_empty_message_rejected(make_chat):
    chat, _ = make_chat()
    with pytest.raises(ValueError):
        chat.process("   ")


def test_chat_executes_model_action(make_chat, workspace):
    chat, client = make_chat(reply("create", "Creating notes", {
        "operation": "create_file", "targets": ["notes.md"], "content": "# Notes"}))

    out = chat.process("create notes.md", {"currentPath": ""})
    assert out["type"] == "create"
    assert out["actionResult"]["path"] == str(workspace.root / "notes.md")
    assert out["workingDirectory"] == str(workspace.root)
    assert (workspace.root / "notes.md").read_text() == "# Notes"
    assert "Working directory: " + str(workspace.root) in client.prompts[0]


def test_chat_includes_current_files_in_prompt(make_chat, file_ops):
    file_ops.create_file("docs/readme.txt", "")
    chat, client = make_chat(reply("info", "ok"))
    chat.process("what is here?", {"currentPath": "docs"})
    assert "readme.txt" in client.prompts[0]


def test_chat_action_failure_is_reported_not_raised(make_chat, workspace):
    chat, _ = make_chat(reply("create", "Escaping", {
        "operation": "create_file", "targets": ["../outside.txt"]}))
    out = chat.process("write outside")
    assert out["actionResult"]["error"].startswith("Failed to execute action:")
    assert not (workspace.root.parent / "outside.txt").exists()


def test_chat_non_string_content_is_reported(make_chat, workspace):
    chat, _ = make_chat(reply("create", "ok", {
        "operation": "create_file", "targets": ["n.txt"], "content": 5}))
    out = chat.process("make n.txt")
    assert out["type"] == "create"
    assert out["actionResult"] == {"error": "Failed to execute action: File content must be a string"}
    assert not (workspace.root / "n.txt").exists()


def test_chat_unexpected_action_error_is_reported(make_chat, file_ops, monkeypatch):
    def boom(rel_path):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(file_ops, "create_folder", boom)
    chat, _ = make_chat(reply("create", "Folder", {"operation": "create_folder", "targets": ["d"]}))
    out = chat.process("make folder d")
    assert out["actionResult"] == {"error": "Failed to execute action: disk on fire"}


def test_chat_unstructured_reply_is_informational(make_chat):
    chat, _ = make_chat("Sorry, I am not sure what you mean.")
    out = chat.process("hmm")
    assert out["type"] == "info"
    assert out["message"] == "Sorry, I am not sure what you mean."
    assert out["actionResult"] is None


def test_chat_backend_error_skips_action(make_chat):
    chat, _ = make_chat(RuntimeError("API key not valid"))
    out = chat.process("create a.txt")
    assert out["type"] == "error"
    assert "GEMINI_API_KEY" in out["message"]
    assert out["actionResult"] is None


def test_chat_sets_directory(make_chat, workspace, tmp_path: Path):
    target = tmp_path / "project"
    target.mkdir()
    chat, client = make_chat()

    out = chat.process(f'Set directory to "{target}"')
    assert out["type"] == "directory_set"
    assert out["actionResult"]["directory"] == str(target.resolve())
    assert out["workingDirectory"] == str(target.resolve())
    assert workspace.root == target.resolve()
    assert client.prompts == []


def test_chat_set_directory_failure(make_chat, workspace, tmp_path: Path):
    original = workspace.root
    chat, _ = make_chat()
    out = chat.process(f"change directory to {tmp_path / 'missing'}")
    assert out["type"] == "error"
    assert "couldn't set the directory" in out["message"]
    assert workspace.root == original


def test_chat_directory_request_without_path(make_chat):
    chat, client = make_chat()
    out = chat.process("I want to change my working directory")
    assert out["type"] == "directory_request"
    assert client.prompts == []


def test_chat_change_working_directory_phrase(make_chat, workspace, tmp_path: Path):
    target = tmp_path / "elsewhere"
    target.mkdir()
    chat, client = make_chat()
    out = chat.process(f"Change working directory to {target}")
    assert out["type"] == "directory_set"
    assert workspace.root == target.resolve()
    assert client.prompts == []


@pytest.mark.parametrize("message", [
    "create notes I can work in later",
    "Please write a todo file I can work in tomorrow",
])
def test_chat_directory_phrase_mid_sentence_reaches_model(make_chat, workspace, message):
    original = workspace.root
    chat, client = make_chat(reply("info", "Sure"))
    out = chat.process(message)
    assert out["type"] == "info"
    assert out["message"] == "Sure"
    assert workspace.root == original
    assert len(client.prompts) == 1
