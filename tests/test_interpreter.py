# tests/test_interpreter.py
import json

import pytest

from filemanager.errors import ExternalServiceError, classify_service_error
from filemanager.services.interpreter import (
    CommandInterpreter,
    GeminiClient,
    Parsed,
    Unstructured,
    build_prompt,
    parse_reply,
)

REPLY = {
    "type": "create",
    "message": "Creating test.txt",
    "action": {"operation": "create_file", "targets": ["test.txt"], "content": ""},
}


def test_parse_plain_json():
    result = parse_reply(json.dumps(REPLY))
    assert isinstance(result, Parsed)
    assert result.to_response() == REPLY


def test_parse_strips_markdown_fence():
    text = "Sure!\n```json\n" + json.dumps(REPLY) + "\n```\n"
    result = parse_reply(text)
    assert isinstance(result, Parsed)
    assert result.reply["action"]["targets"] == ["test.txt"]


def test_parse_missing_action_defaults_to_none():
    result = parse_reply('{"type": "info", "message": "hi"}')
    assert result.to_response() == {"type": "info", "message": "hi", "action": None}


@pytest.mark.parametrize("text", [
    "I made the file for you.",
    '{"message": "no type"}',
    '{"type": "create", "message": ""}',
    '{"type": "list", "message": "x", "action": "list"}',
    "[1, 2]",
])
def test_unparseable_replies_fall_back_to_text(text):
    result = parse_reply(text)
    assert isinstance(result, Unstructured)
    assert result.to_response() == {"type": "info", "message": text, "action": None}


def test_unstructured_create_file_text_gets_naming_hint():
    result = parse_reply("I will create a file called notes for you")
    assert isinstance(result, Unstructured)
    assert result.to_response()["message"] == (
        "I will create a file called notes for you"
        " (Fallback: Please try being more specific about the file name)"
    )


def test_empty_unstructured_reply_gets_default_message():
    assert Unstructured("").to_response() == {
        "type": "info",
        "message": "I encountered an issue processing your request.",
        "action": None,
    }


@pytest.mark.parametrize("message, kind", [
    ("API_KEY_INVALID: API key not valid", "auth"),
    ("429 Resource has been exhausted (e.g. check quota).", "quota"),
    ("rate limit reached", "quota"),
    ("connection reset by peer", "generic"),
])
def test_classify_service_error(message, kind):
    err = classify_service_error(RuntimeError(message))
    assert err.kind == kind
    assert err.user_message


def test_generic_user_message_carries_detail():
    err = ExternalServiceError("socket closed")
    assert err.user_message == "Error processing request: socket closed"


def test_missing_api_key_fails_on_use_not_construction():
    client = GeminiClient(None, "gemini-2.0-flash")
    with pytest.raises(ExternalServiceError) as info:
        client.generate("hello")
    assert info.value.kind == "auth"


def test_process_command_records_history(fake_client):
    client = fake_client(json.dumps(REPLY))
    interp = CommandInterpreter(client)
    out = interp.process_command("make test.txt", {"currentPath": "src", "currentFiles": [{"name": "a"}]})

    assert out == REPLY
    assert 'USER REQUEST: "make test.txt"' in client.prompts[0]
    assert "Current directory: src" in client.prompts[0]
    (turn,) = interp.history()
    assert turn["user"] == "make test.txt"
    assert turn["assistant"] == json.dumps(REPLY)
    assert turn["timestamp"]


def test_process_command_turns_backend_failure_into_error_reply(fake_client):
    interp = CommandInterpreter(fake_client(RuntimeError("quota exceeded")))
    out = interp.process_command("anything")
    assert out["type"] == "error"
    assert out["action"] is None
    assert "quota" in out["message"].lower()
    assert interp.history() == []


def test_history_is_bounded(fake_client):
    interp = CommandInterpreter(fake_client(*['{"type": "info", "message": "ok"}'] * 3), history_limit=2)
    for i in range(3):
        interp.process_command(f"msg {i}")
    assert [t["user"] for t in interp.history()] == ["msg 1", "msg 2"]


def test_build_prompt_defaults():
    prompt = build_prompt("hi", {})
    assert "Current directory: root" in prompt
    assert "Current files: []" in prompt
    assert prompt.rstrip().endswith("RESPOND ONLY WITH VALID JSON. NO ADDITIONAL TEXT.")
