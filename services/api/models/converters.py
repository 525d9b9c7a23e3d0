from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from core.text import note_excerpt
from core.validation import round_half_up
from . import Attachment, Board, Card, ChecklistNote, NoteFolder, User, UserNote


def _iso(v: Optional[datetime]) -> Optional[str]:
    """Naive datetimes in the DB are UTC; expose them as ISO-8601 with Z."""
    if v is None:
        return None
    return v.isoformat() + "Z"


def progress_percent(notes: List[ChecklistNote]) -> int:
    """Share of done checklist items, 0..100. Empty checklist -> 0."""
    if not notes:
        return 0
    done = sum(1 for n in notes if n.done)
    return round_half_up(done * 100 / len(notes))


def user_to_api(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
    }


def board_to_api(board: Board) -> Dict[str, Any]:
    return {
        "id": board.id,
        "name": board.name,
        "created_at": _iso(board.created_at),
    }


def checklist_note_to_api(note: ChecklistNote) -> Dict[str, Any]:
    return {
        "id": note.id,
        "card_id": note.card_id,
        "text": note.text,
        "done": bool(note.done),
    }


def attachment_to_api(att: Attachment) -> Dict[str, Any]:
    return {
        "id": att.id,
        "card_id": att.card_id,
        "name": att.name,
        "url": att.url,
        "mime": att.mime,
        "size": att.size,
        "created_at": _iso(att.created_at),
    }


def card_to_api(card: Card, *, with_attachments: bool = True) -> Dict[str, Any]:
    notes = list(card.notes or [])
    out = {
        "id": card.id,
        "board_id": card.board_id,
        "title": card.title,
        "summary": card.summary,
        "tags": list(card.tags or []),
        "position": card.position,
        "created_at": _iso(card.created_at),
        "updated_at": _iso(card.updated_at),
        "notes": [checklist_note_to_api(n) for n in notes],
        "progress": progress_percent(notes),
    }
    if with_attachments:
        out["attachments"] = [attachment_to_api(a) for a in (card.attachments or [])]
    return out


def folder_to_api(folder: NoteFolder) -> Dict[str, Any]:
    return {
        "id": folder.id,
        "name": folder.name,
        "position": folder.position,
        "created_at": _iso(folder.created_at),
        "updated_at": _iso(folder.updated_at),
    }


def user_note_to_api(note: UserNote) -> Dict[str, Any]:
    return {
        "id": note.id,
        "folder_id": note.folder_id,
        "title": note.title,
        "content": note.content,
        "excerpt": note_excerpt(note.content),
        "font_size": note.font_size,
        "position": note.position,
        "created_at": _iso(note.created_at),
        "updated_at": _iso(note.updated_at),
    }
