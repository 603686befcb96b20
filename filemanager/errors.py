# filemanager/errors.py
"""
Error taxonomy for the file manager.

Missing-directory and is-a-directory conditions use the built-in
NotADirectoryError / IsADirectoryError; everything else lives here.
"""
from __future__ import annotations

from typing import Literal

ServiceErrorKind = Literal["auth", "quota", "generic"]


class FileManagerError(Exception):
    """Base class for errors raised by the file manager services."""


class PathEscapeError(FileManagerError, PermissionError):
    """A resolved path falls outside the current working root."""

    def __init__(self, path: str, root: str):
        self.path = path
        self.root = root
        super().__init__(f"Path escapes working directory: {path}")


class NotFoundError(FileManagerError, FileNotFoundError):
    """A file or directory that must exist does not."""

    def __init__(self, path: str, what: str = "Path"):
        self.path = path
        super().__init__(f"{what} does not exist: {path}")


class ExternalServiceError(FileManagerError):
    """
    The text-generation backend failed.

    `kind` tells the chat layer which actionable message to show:
      - auth:    missing or rejected API key
      - quota:   rate limit / quota exhausted
      - generic: anything else
    """

    _MESSAGES = {
        "auth": "API key configuration error. Please check your GEMINI_API_KEY in the .env file.",
        "quota": "API quota exceeded. Please try again later or check your Gemini API limits.",
    }

    def __init__(self, message: str, kind: ServiceErrorKind = "generic"):
        self.kind = kind
        super().__init__(message)

    @property
    def user_message(self) -> str:
        if self.kind in self._MESSAGES:
            return self._MESSAGES[self.kind]
        return f"Error processing request: {self}"


class MalformedResponseError(FileManagerError, ValueError):
    """The model reply was not JSON with the required envelope fields."""


def classify_service_error(exc: Exception) -> ExternalServiceError:
    """Wrap any backend exception, sniffing its message for auth/quota failures."""
    if isinstance(exc, ExternalServiceError):
        return exc
    text = str(exc)
    lowered = text.lower()
    if "api_key" in lowered or "api key" in lowered:
        kind: ServiceErrorKind = "auth"
    elif "quota" in lowered or "limit" in lowered or "429" in lowered:
        kind = "quota"
    else:
        kind = "generic"
    return ExternalServiceError(text or type(exc).__name__, kind=kind)
