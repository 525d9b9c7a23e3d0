"""
Pydantic schemas for boards, cards, tags and checklist items.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


# ============ Boards ============

class BoardCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=200, description="Board name (blank -> General)")


class BoardRename(BaseModel):
    name: str = Field(..., max_length=200)


# ============ Cards ============

class CardCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=300, description="Card title (blank -> New project)")
    board_id: Optional[str] = Field(None, description="Target board; defaults to the first board")


class CardPatch(BaseModel):
    """Partial update; only fields present in the payload are applied."""
    title: Optional[str] = Field(None, max_length=300)
    summary: Optional[str] = Field(None, max_length=20000)
    tags: Optional[List[str]] = Field(None, max_length=100)


class CardReorder(BaseModel):
    """Drag-and-drop result: card ids in their new visual order."""
    board_id: Optional[str] = Field(None, description="Board being reordered; defaults to the first board")
    ordered_ids: List[str] = Field(..., min_length=1, max_length=2000)


class TagIn(BaseModel):
    tag: str = Field(..., max_length=100)


# ============ Checklist ============

class ChecklistNoteCreate(BaseModel):
    text: str = Field(..., max_length=5000)


class ChecklistNoteEdit(BaseModel):
    text: str = Field(..., max_length=5000)
