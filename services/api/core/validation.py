"""
Validation utilities for the checklist board and notes workspace.
Normalizes user input and raises clear 400s for bad values.
"""
import math
import re
from typing import List, Optional, Iterable

from fastapi import HTTPException

DEFAULT_CARD_TITLE = "New project"
DEFAULT_BOARD_NAME = "General"
DEFAULT_FOLDER_NAME = "New folder"
DEFAULT_WORKSPACE_FOLDER_NAME = "General"
DEFAULT_NOTE_TITLE = "New note"

MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 40

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.\- ]+")


def require_text(value: Optional[str], field: str) -> str:
    """
    Trim `value` and reject it when empty.

    Raises:
        HTTPException: 400 if value is missing or blank
    """
    cleaned = (value or "").strip()
    if not cleaned:
        raise HTTPException(
            status_code=400,
            detail=f"{field} must not be empty"
        )
    return cleaned


def text_or_default(value: Optional[str], default: str) -> str:
    """Trimmed value, or `default` when blank."""
    cleaned = (value or "").strip()
    return cleaned or default


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """
    Trim every tag, drop empties and keep the first occurrence of duplicates.
    Order is preserved.
    """
    seen = set()
    out: List[str] = []
    for tag in tags:
        t = (tag or "").strip()
        if not t or t in seen:
            continue
        seen.add(t)
        out.append(t)
    return out


def round_half_up(value: float) -> int:
    """2.5 -> 3, not the banker's rounding of round()."""
    return int(math.floor(value + 0.5))


def clamp_font_size(size: float) -> int:
    """Round and clamp an editor font size into [12, 40]."""
    return min(MAX_FONT_SIZE, max(MIN_FONT_SIZE, round_half_up(size)))


def safe_filename(name: str) -> str:
    """
    Replace anything outside [A-Za-z0-9_ .-] (plus unicode word chars)
    with '_' so the name is usable inside an object-storage path.
    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name or "")
    return cleaned or "file"


def ensure_unique_ids(ids: List[str]) -> List[str]:
    """
    Ensure a reorder payload does not list the same id twice.

    Raises:
        HTTPException: 400 if empty or duplicate ids found
    """
    cleaned = [i.strip() for i in ids if isinstance(i, str) and i.strip()]
    if not cleaned:
        raise HTTPException(
            status_code=400,
            detail="ordered_ids required"
        )

    seen = set()
    duplicates = []
    for i in cleaned:
        if i in seen:
            duplicates.append(i)
        seen.add(i)

    if duplicates:
        raise HTTPException(
            status_code=400,
            detail=f"Duplicate ids found: {sorted(set(duplicates))}"
        )
    return cleaned
