# server/http_app.py
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from filemanager.config import Settings
from filemanager.di import Container, build_container
from filemanager.logging import configure_logging
from filemanager.services.workspace import expand_shortcut

from server.tools.chat import ChatIn
from server.tools.files import (
    CreateFileIn,
    CreateFolderIn,
    CreateStructureIn,
    DeleteIn,
    ExploreDirectoryIn,
    SetDirectoryIn,
)

settings = Settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="AI File Manager", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_container() -> Container:
    return build_container(settings)


# ---------- Envelope helpers ----------

def _ok(**body: Any) -> Dict[str, Any]:
    return {"success": True, **body}


def _fail(status_code: int, exc: Exception | str) -> JSONResponse:
    return JSONResponse({"success": False, "error": str(exc)}, status_code=status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    detail = f"{where}: {first.get('msg', 'invalid request')}" if where else first.get("msg", "invalid request")
    return _fail(status.HTTP_400_BAD_REQUEST, detail)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ---------- File routes ----------

@app.post("/api/files/set-directory")
def set_directory(body: SetDirectoryIn, c: Container = Depends(get_container)):
    if not body.directory.strip():
        return _fail(status.HTTP_400_BAD_REQUEST, "Directory path is required")
    try:
        directory = str(c.workspace.set_working_directory(expand_shortcut(body.directory)))
    except OSError as e:
        return _fail(status.HTTP_400_BAD_REQUEST, e)
    return _ok(directory=directory, message=f"Working directory set to: {directory}")


@app.get("/api/files/current-directory")
def current_directory(c: Container = Depends(get_container)):
    home = Path.home()
    return _ok(
        currentDirectory=str(c.workspace.root),
        allowedRoots=c.workspace.list_allowed_roots(),
        homeDirectory=str(home),
        desktopDirectory=str(home / "Desktop"),
        documentsDirectory=str(home / "Documents"),
    )


@app.post("/api/files/explore-directory")
def explore_directory(body: ExploreDirectoryIn, c: Container = Depends(get_container)):
    if not body.directory.strip():
        return _fail(status.HTTP_400_BAD_REQUEST, "Directory path is required")
    try:
        entries = c.file_ops.explore_directory(expand_shortcut(body.directory))
    except OSError as e:
        return _fail(status.HTTP_400_BAD_REQUEST, e)
    return _ok(directory=body.directory, items=[e.to_dict() for e in entries if e.type == "folder"])


@app.get("/api/files/list")
def list_files(path: str = "", c: Container = Depends(get_container)):
    try:
        items = c.file_ops.list_directory(path)
        full_path = c.workspace.resolve(path)
    except OSError as e:
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    return _ok(
        items=[e.to_dict() for e in items],
        currentDirectory=str(c.workspace.root),
        fullPath=str(full_path),
    )


@app.get("/api/files/content")
def file_content(path: str = "", c: Container = Depends(get_container)):
    try:
        content = c.file_ops.get_file_content(path)
    except (OSError, UnicodeDecodeError) as e:
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    return _ok(content=content, filePath=path)


@app.post("/api/files/create-file")
def create_file(body: CreateFileIn, c: Container = Depends(get_container)):
    try:
        result = c.file_ops.create_file(body.path, body.content)
    except OSError as e:
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    return _ok(path=result, message=f"File created: {result}")


@app.post("/api/files/create-folder")
def create_folder(body: CreateFolderIn, c: Container = Depends(get_container)):
    try:
        result = c.file_ops.create_folder(body.path)
    except OSError as e:
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    return _ok(path=result, message=f"Folder created: {result}")


@app.delete("/api/files/delete")
def delete_item(body: DeleteIn, c: Container = Depends(get_container)):
    try:
        c.file_ops.delete_item(body.path)
    except OSError as e:
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    return _ok(message=f"Item deleted successfully: {body.path}")


@app.post("/api/files/create-structure")
def create_structure(body: CreateStructureIn, c: Container = Depends(get_container)):
    try:
        results = c.file_ops.create_structure(body.structure, body.base_path)
        created_in = c.workspace.resolve(body.base_path)
    except OSError as e:
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    return _ok(
        results=results,
        createdIn=str(created_in),
        message=f"Structure created with {len(results)} items",
    )


# ---------- Chat routes ----------

@app.post("/api/ai/process")
def process_message(body: ChatIn, c: Container = Depends(get_container)):
    if not body.message.strip():
        return _fail(status.HTTP_400_BAD_REQUEST, "Message is required")
    try:
        response = c.chat_service.process(body.message, body.context.model_dump(by_alias=True))
    except Exception as e:
        logger.exception("chat processing failed")
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    return _ok(response=response)


@app.get("/api/ai/history")
def history(c: Container = Depends(get_container)):
    return _ok(history=c.chat_service.history())


@app.get("/api/ai/working-directory")
def working_directory(c: Container = Depends(get_container)):
    return _ok(currentDirectory=str(c.workspace.root), allowedRoots=c.workspace.list_allowed_roots())


# ---------- UI ----------

@app.get("/", include_in_schema=False)
def index():
    page = settings.STATIC_DIR / "index.html"
    if not page.is_file():
        return JSONResponse({"ok": True, "service": app.title})
    return FileResponse(page)


if settings.STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")


if __name__ == "__main__":
    import uvicorn
    logger.info("AI File Manager running on http://%s:%s", settings.HTTP_HOST, settings.HTTP_PORT)
    uvicorn.run(
        "server.http_app:app",
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        reload=False,
    )
