from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TypedDict

# A row as held by a record store, keyed by storage column names.
StorageRow = Dict[str, Any]


# PUBLIC_INTERFACE
class TimelineEntry(TypedDict):
    """
    A life event on the timeline, keyed by display (API) field names.

    Fields:
    - id: Store-assigned identifier
    - dateValue: ISO calendar date; entries are shown newest first
    - title, content, tag: Display strings
    - color: Accent token, 'bg-emerald-500' when absent
    - markdownContent: Optional long-form body; None means no detail page
    """

    id: str
    dateValue: str
    title: str
    content: str
    tag: str
    color: str
    markdownContent: Optional[str]


# PUBLIC_INTERFACE
class CareerEntry(TypedDict):
    """
    A position in the career history, ranked by `order` (highest first).
    """

    id: str
    role: str
    company: str
    period: str
    description: str
    stack: List[str]
    order: int


# PUBLIC_INTERFACE
class Post(TypedDict):
    """
    A short-form post. `likes` and `date` are display strings, not numbers or dates.
    """

    id: str
    content: str
    likes: str
    date: str
    subtext: Optional[str]
    order: int


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ChangeEvent:
    """Notification delivered to store subscribers after a write to a table."""

    table: str
    kind: str  # INSERT, UPDATE or DELETE
    record_id: str
