# server/tools/chat.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatContextIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    current_path: str = Field("", alias="currentPath", description="Folder the UI is showing")
    working_directory: Optional[str] = Field(None, alias="workingDirectory")
    selected_items: List[str] = Field(default_factory=list, alias="selectedItems")


class ChatIn(BaseModel):
    message: str = Field("", description="Free-text instruction from the user")
    context: ChatContextIn = Field(default_factory=ChatContextIn)
