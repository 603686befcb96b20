# server/main.py
from fastmcp import FastMCP
from filemanager.di import build_container
from filemanager.logging import configure_logging
from server.registry import build_tool_registry, register_into_fastmcp

def create_app() -> FastMCP:
    """
    Build DI container, create FastMCP host, and register the file tools.
    The tools are thin adapters over the same FileOperationsService the HTTP app uses.
    """
    container = build_container()
    configure_logging(container.settings.LOG_LEVEL)

    mcp = FastMCP("AIFileManager")
    register_into_fastmcp(mcp, build_tool_registry(container.file_ops))
    return mcp


if __name__ == "__main__":
    app = create_app()
    # stdio transport: client (agent/IDE) launches this process and speaks JSON-RPC on stdin/stdout
    app.run(transport="stdio")
