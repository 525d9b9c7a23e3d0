"""
Pydantic schemas for API request/response validation.
"""
from .auth import SignupIn, LoginIn, UserOut, TokenOut
from .board import (
    BoardCreate,
    BoardRename,
    CardCreate,
    CardPatch,
    CardReorder,
    TagIn,
    ChecklistNoteCreate,
    ChecklistNoteEdit,
)
from .user_note import (
    FolderCreate,
    FolderRename,
    FolderReorder,
    UserNoteCreate,
    UserNotePatch,
    UserNoteMove,
    UserNoteReorder,
)


# Re-export all
__all__ = [
    "SignupIn",
    "LoginIn",
    "UserOut",
    "TokenOut",
    "BoardCreate",
    "BoardRename",
    "CardCreate",
    "CardPatch",
    "CardReorder",
    "TagIn",
    "ChecklistNoteCreate",
    "ChecklistNoteEdit",
    "FolderCreate",
    "FolderRename",
    "FolderReorder",
    "UserNoteCreate",
    "UserNotePatch",
    "UserNoteMove",
    "UserNoteReorder",
]
