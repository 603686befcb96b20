# filemanager/di.py
from dataclasses import dataclass
from filemanager.config import Settings
from filemanager.services.actions import ActionExecutor
from filemanager.services.chat import ChatService
from filemanager.services.filesystem import FileOperationsService
from filemanager.services.interpreter import CommandInterpreter, GeminiClient, TextGenerator
from filemanager.services.workspace import Workspace

@dataclass
class Container:
    settings: Settings
    workspace: Workspace
    file_ops: FileOperationsService
    interpreter: CommandInterpreter
    chat_service: ChatService

def build_container(settings: Settings | None = None, client: TextGenerator | None = None) -> Container:
    """
    Wire the single workspace and file service shared by every transport.
    `client` replaces the Gemini backend (tests pass a fake).
    """
    s = settings or Settings()
    workspace = Workspace(s.WORKSPACE_DIR)
    workspace.ensure_root()
    file_ops = FileOperationsService(workspace)

    if client is None:
        client = GeminiClient(s.GEMINI_API_KEY, s.GEMINI_MODEL, temperature=s.GEMINI_TEMPERATURE,
                              max_output_tokens=s.GEMINI_MAX_OUTPUT_TOKENS)
    interpreter = CommandInterpreter(client, history_limit=s.HISTORY_LIMIT)
    chat = ChatService(workspace, file_ops, interpreter, ActionExecutor(file_ops))

    return Container(s, workspace, file_ops, interpreter, chat)
