# server/tools/files.py
from typing import Any, Dict
from pydantic import BaseModel, ConfigDict, Field


class ListIn(BaseModel):
    path: str = Field("", description="Folder relative to the working directory ('' for the root)")


class ReadIn(BaseModel):
    path: str = Field(..., description="File relative to the working directory")


class CreateFileIn(BaseModel):
    path: str = Field(..., description="File relative to the working directory")
    content: str = Field("", description="UTF-8 text content to write")


class CreateFolderIn(BaseModel):
    path: str = Field(..., description="Folder relative to the working directory")


class DeleteIn(BaseModel):
    path: str = Field(..., description="File or folder relative to the working directory")


class CreateStructureIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    structure: Dict[str, Any] = Field(
        ..., description="Nested mapping: dict values are folders, string values are file contents"
    )
    base_path: str = Field("", alias="basePath", description="Folder to create the structure in")


class SetDirectoryIn(BaseModel):
    directory: str = Field("", description="Absolute path, or DESKTOP / DOCUMENTS / DOWNLOADS")


class ExploreDirectoryIn(BaseModel):
    directory: str = Field("", description="Absolute path of a directory to browse")
