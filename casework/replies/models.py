from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

EDITABLE_FIELDS = frozenset({"title", "content", "category"})


@dataclass(slots=True, frozen=True)
class SavedReply:
    id: str
    title: str
    content: str
    category: str | None
    created_by: str
    created_at: datetime
    updated_at: datetime
