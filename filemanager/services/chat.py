# filemanager/services/chat.py
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from filemanager.logging import redact_str
from filemanager.services.actions import ActionExecutor
from filemanager.services.filesystem import FileOperationsService
from filemanager.services.interpreter import CommandInterpreter
from filemanager.services.workspace import Workspace, expand_shortcut

logger = logging.getLogger(__name__)

SET_DIRECTORY_RE = re.compile(
    r"^\s*(?:please\s+)?(?:(?:(?:set|change)\s+(?:the\s+)?(?:working\s+)?|working\s+)directory\s+to|work\s+in)\s+(.+?)\s*$",
    re.IGNORECASE,
)
DIRECTORY_KEYWORDS = ("set directory", "change directory", "working directory")

DIRECTORY_HELP = (
    "I can help you set a working directory! Please provide the full path to the directory "
    "where you want to create files. For example: \"Set directory to ~/Desktop/MyProject\" "
    "or \"Change working directory to DOCUMENTS\"."
)


class ChatService:
    """
    One chat turn: directory intents are handled locally, everything else goes
    through the interpreter and, if it proposes one, the action executor.
    Failures after input validation come back as error-shaped replies.
    """

    def __init__(self, workspace: Workspace, file_ops: FileOperationsService,
                 interpreter: CommandInterpreter, executor: ActionExecutor):
        self.workspace = workspace
        self.file_ops = file_ops
        self.interpreter = interpreter
        self.executor = executor

    def process(self, message: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not message or not message.strip():
            raise ValueError("Message is required")
        context = dict(context or {})
        logger.info("chat message: %s", redact_str(message))

        response = self._directory_intent(message)
        if response is None:
            response = self._interpret(message, context)
        response["workingDirectory"] = str(self.workspace.root)
        return response

    def history(self):
        return self.interpreter.history()

    def _directory_intent(self, message: str) -> Optional[Dict[str, Any]]:
        match = SET_DIRECTORY_RE.match(message)
        if match:
            requested = expand_shortcut(match.group(1).strip().strip("'\""))
            try:
                directory = str(self.workspace.set_working_directory(requested))
            except (OSError, ValueError) as e:
                logger.warning("chat could not set directory %r: %s", requested, e)
                return {
                    "type": "error",
                    "message": f"I couldn't set the directory: {e}. Please make sure the path exists "
                               "and you have permission to access it.",
                    "action": None,
                }
            return {
                "type": "directory_set",
                "message": f"Great! I've set the working directory to: {directory}. Now I can create "
                           "files and folders in this location. What would you like me to create?",
                "action": None,
                "actionResult": {"message": f"Working directory changed to: {directory}", "directory": directory},
            }

        lowered = message.lower()
        if any(k in lowered for k in DIRECTORY_KEYWORDS):
            return {"type": "directory_request", "message": DIRECTORY_HELP, "action": None}
        return None

    def _interpret(self, message: str, context: Dict[str, Any]) -> Dict[str, Any]:
        try:
            current_files = [e.to_dict() for e in self.file_ops.list_directory(context.get("currentPath") or "")]
        except OSError as e:
            logger.warning("could not load current files: %s", e)
            current_files = []
        context["currentFiles"] = current_files
        context["workingDirectory"] = str(self.workspace.root)

        response = self.interpreter.process_command(message, context)

        action_result = None
        if response.get("action") and response.get("type") != "error":
            try:
                action_result = self.executor.execute(response["action"])
            except Exception as e:
                logger.exception("action execution failed: %s", e)
                action_result = {"error": f"Failed to execute action: {e}"}
        response["actionResult"] = action_result
        return response
