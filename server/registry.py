# server/registry.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Type
from pydantic import BaseModel

from filemanager.services.filesystem import FileOperationsService

# Same input models the HTTP routes validate with.
from server.tools.files import CreateFileIn, CreateFolderIn, CreateStructureIn, DeleteIn, ListIn, ReadIn


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[BaseModel], Any]


class ToolHandlers:
    """
    Named handlers for each tool (no lambdas), all routed through one
    FileOperationsService so MCP calls share the HTTP app's sandbox rules.
    """
    def __init__(self, file_ops: FileOperationsService):
        self.file_ops = file_ops

    def list_files(self, args: ListIn) -> list:
        return [e.to_dict() for e in self.file_ops.list_directory(args.path)]

    def read_file(self, args: ReadIn) -> str:
        return self.file_ops.get_file_content(args.path)

    def create_file(self, args: CreateFileIn) -> str:
        return self.file_ops.create_file(args.path, args.content)

    def create_folder(self, args: CreateFolderIn) -> str:
        return self.file_ops.create_folder(args.path)

    def delete_item(self, args: DeleteIn) -> str:
        return self.file_ops.delete_item(args.path)

    def create_structure(self, args: CreateStructureIn) -> list:
        return self.file_ops.create_structure(args.structure, args.base_path)


def build_tool_registry(file_ops: FileOperationsService) -> Dict[str, ToolSpec]:
    """
    Build the registry once at startup.
    Transport layers read from it to expose tools.
    """
    handlers = ToolHandlers(file_ops)
    specs = [
        ToolSpec("list_files", "List the direct children of a folder in the working directory",
                 ListIn, handlers.list_files),
        ToolSpec("read_file", "Read a UTF-8 text file in the working directory", ReadIn, handlers.read_file),
        ToolSpec("create_file", "Create or overwrite a text file in the working directory",
                 CreateFileIn, handlers.create_file),
        ToolSpec("create_folder", "Create a folder (and parents) in the working directory",
                 CreateFolderIn, handlers.create_folder),
        ToolSpec("delete_item", "Delete a file or folder tree in the working directory",
                 DeleteIn, handlers.delete_item),
        ToolSpec("create_structure", "Create a nested folder/file structure in one call",
                 CreateStructureIn, handlers.create_structure),
    ]
    return {spec.name: spec for spec in specs}


def register_into_fastmcp(mcp, registry: Dict[str, ToolSpec]) -> None:
    """
    Register all registry tools into a FastMCP stdio host.
    """
    for spec in registry.values():
        # Create a local closure so each handler binds to its spec
        def make_tool(spec: ToolSpec):
            def tool_handler(input):
                return spec.handler(input)
            # Real annotation objects: FastMCP builds the input schema from them.
            tool_handler.__annotations__ = {"input": spec.input_model}
            tool_handler.__name__ = spec.name
            return tool_handler

        mcp.tool(name=spec.name, description=spec.description)(make_tool(spec))
