"""
ORM models for the checklist board and the notes workspace.

Ownership chain:
  users → boards → cards → (card_notes, attachments)
  users → note_folders → user_notes
"""
from .user import User
from .board import Board, Card, ChecklistNote, Attachment
from .user_note import NoteFolder, UserNote, DEFAULT_FONT_SIZE

__all__ = [
    "User",
    "Board",
    "Card",
    "ChecklistNote",
    "Attachment",
    "NoteFolder",
    "UserNote",
    "DEFAULT_FONT_SIZE",
]
