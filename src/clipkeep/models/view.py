from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from clipkeep.models.clip_item import ClipItem, ContentKind


class ClipItemView(BaseModel):
    """Render-ready snapshot of a history entry."""
    item_id: str
    kind: ContentKind
    preview: str
    icon_name: str
    relative_time: str
    pinned: bool = False
    captured_at: datetime
    size_bytes: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    @classmethod
    def from_item(cls, item: ClipItem, now: Optional[datetime] = None) -> "ClipItemView":
        return cls(
            item_id=item.item_id,
            kind=item.kind,
            preview=item.preview,
            icon_name=item.icon_name,
            relative_time=item.relative_time(now),
            pinned=item.pinned,
            captured_at=item.captured_at,
            size_bytes=item.size_bytes,
        )
