# filemanager/services/interpreter.py
from __future__ import annotations

import json
import logging
import re
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Union

import google.generativeai as genai

from filemanager.errors import ExternalServiceError, MalformedResponseError, classify_service_error
from filemanager.logging import redact_str
from filemanager.services.validator import JsonValidatorService

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
FALLBACK_HINT = " (Fallback: Please try being more specific about the file name)"

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

PROMPT_TEMPLATE = """You are a helpful file management assistant. You can help users:
1. Create files and folders
2. Delete files and folders
3. List directory contents
4. Create project structures from code descriptions
5. Organize files

CURRENT CONTEXT:
- Working directory: {working_directory}
- Current directory: {current_path}
- Current files: {current_files}
- Selected items: {selected_items}

USER REQUEST: "{user_input}"

IMPORTANT: Always respond with valid JSON in this exact format:
{{
    "type": "create|delete|list|structure|info",
    "message": "A friendly conversational response explaining what you're doing",
    "action": {{
        "operation": "create_file|create_folder|delete|create_structure|list",
        "targets": ["filename.ext"] or ["foldername/"],
        "content": "file content if creating a file",
        "structure": {{}},
        "basePath": "optional folder, relative to the working directory, for create_structure"
    }}
}}
Use "action": null when no file operation is needed.

EXAMPLES:

For "Create a new file called test.txt":
{{
    "type": "create",
    "message": "I'll create a new file called test.txt for you!",
    "action": {{"operation": "create_file", "targets": ["test.txt"], "content": ""}}
}}

For "Create a React project structure":
{{
    "type": "structure",
    "message": "I'll create a complete React project structure with all the essential folders and files!",
    "action": {{
        "operation": "create_structure",
        "structure": {{
            "src": {{"components": {{}}, "utils": {{}}, "styles": {{}}}},
            "public": {{}},
            "package.json": "{{\\n  \\"name\\": \\"react-app\\",\\n  \\"version\\": \\"1.0.0\\"\\n}}",
            "README.md": "# React Project"
        }}
    }}
}}

For "Delete old.txt and tmp":
{{
    "type": "delete",
    "message": "Removing old.txt and the tmp folder.",
    "action": {{"operation": "delete", "targets": ["old.txt", "tmp"]}}
}}

RESPOND ONLY WITH VALID JSON. NO ADDITIONAL TEXT."""


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


class GeminiClient:
    """
    Thin wrapper over google-generativeai. The model is built on first use so a
    missing key only fails the chat turn that needs it.
    """

    def __init__(self, api_key: Optional[str], model_name: str, *, temperature: float = 0.7,
                 max_output_tokens: int = 2048):
        self.api_key = api_key
        self.model_name = model_name
        self.generation_config = {
            "temperature": temperature,
            "top_k": 1,
            "top_p": 1,
            "max_output_tokens": max_output_tokens,
        }
        self._model = None

    def _get_model(self):
        if self._model is None:
            if not self.api_key:
                raise ExternalServiceError("GEMINI_API_KEY not configured in environment variables", kind="auth")
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                model_name=self.model_name,
                generation_config=self.generation_config,
                safety_settings=SAFETY_SETTINGS,
            )
            logger.info("initialized Gemini model %s", self.model_name)
        return self._model

    def generate(self, prompt: str) -> str:
        response = self._get_model().generate_content(prompt)
        text = response.text if response is not None else ""
        if not text:
            raise ExternalServiceError("No response from Gemini API")
        return text


# ---------- Reply parsing ----------

@dataclass(frozen=True)
class Parsed:
    reply: Dict[str, Any]

    def to_response(self) -> Dict[str, Any]:
        return {
            "type": self.reply["type"],
            "message": self.reply["message"],
            "action": self.reply.get("action"),
        }


@dataclass(frozen=True)
class Unstructured:
    text: str

    def to_response(self) -> Dict[str, Any]:
        message = self.text or "I encountered an issue processing your request."
        lowered = self.text.lower()
        if "create" in lowered and "file" in lowered:
            message += FALLBACK_HINT
        return {"type": "info", "message": message, "action": None}


ParseResult = Union[Parsed, Unstructured]

_validator = JsonValidatorService()


def strip_fence(text: str) -> str:
    cleaned = text.strip()
    match = FENCE_RE.search(cleaned)
    return match.group(1).strip() if match else cleaned


def decode_reply(text: str) -> Dict[str, Any]:
    """Decode a model reply into its JSON envelope or raise MalformedResponseError."""
    try:
        data = json.loads(strip_fence(text))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Reply is not JSON: {e.msg}") from e
    result = _validator.validate(data)
    if not result["valid"]:
        first = result["errors"][0]
        raise MalformedResponseError(f"Invalid reply at {first['path']}: {first['message']}")
    return data


def parse_reply(text: str) -> ParseResult:
    try:
        return Parsed(decode_reply(text))
    except MalformedResponseError as e:
        logger.warning("unstructured model reply: %s", e)
        return Unstructured(text)


def build_prompt(user_input: str, context: Dict[str, Any]) -> str:
    return PROMPT_TEMPLATE.format(
        working_directory=context.get("workingDirectory") or "",
        current_path=context.get("currentPath") or "root",
        current_files=json.dumps(context.get("currentFiles") or []),
        selected_items=json.dumps(context.get("selectedItems") or []),
        user_input=user_input,
    )


class CommandInterpreter:
    """Turns chat text into a {type, message, action} reply via one model call."""

    def __init__(self, client: TextGenerator, history_limit: int = 100):
        self.client = client
        self._history: deque = deque(maxlen=history_limit)

    def process_command(self, user_input: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        prompt = build_prompt(user_input, context or {})
        try:
            raw = self.client.generate(prompt)
        except Exception as e:
            err = classify_service_error(e)
            logger.error("text generation failed (%s): %s", err.kind, redact_str(str(e)))
            return {"type": "error", "message": err.user_message, "action": None}

        logger.debug("model reply: %s", redact_str(raw))
        self._history.append({
            "user": user_input,
            "assistant": raw,
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        })
        return parse_reply(raw).to_response()

    def history(self) -> List[Dict[str, str]]:
        return list(self._history)
