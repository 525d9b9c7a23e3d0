"""
Pydantic schemas for the notes workspace (folders + rich-text notes).
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class FolderCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)


class FolderRename(BaseModel):
    name: str = Field(..., max_length=200)


class FolderReorder(BaseModel):
    ordered_ids: List[str] = Field(..., min_length=1, max_length=1000)


class UserNoteCreate(BaseModel):
    folder_id: Optional[str] = Field(None, description="Target folder; null = uncategorized")


class UserNotePatch(BaseModel):
    title: Optional[str] = Field(None, max_length=300)
    content: Optional[str] = Field(None, description="Editor HTML")
    font_size: Optional[float] = Field(None, description="Clamped to 12..40")


class UserNoteMove(BaseModel):
    folder_id: Optional[str] = Field(None, description="Destination folder; null = uncategorized")


class UserNoteReorder(BaseModel):
    folder_id: Optional[str] = Field(None, description="Folder being reordered; null = uncategorized")
    ordered_ids: List[str] = Field(..., min_length=1, max_length=2000)
