import datetime
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union
from urllib.parse import SplitResult, urlsplit

from ulid import ULID


PREVIEW_LENGTH = 80


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class ContentKind(str, Enum):
    TEXT = "text"
    URL = "url"
    IMAGE = "image"


_ICON_NAMES = {
    ContentKind.TEXT: "doc.text",
    ContentKind.URL: "link",
    ContentKind.IMAGE: "photo",
}


@dataclass(frozen=True)
class ClipContent:
    """Captured clipboard payload tagged with its kind.

    Text and url payloads are strings (a url keeps its absolute string),
    image payloads are the raw raster bytes. Equality is structural over
    kind and payload only.
    """
    kind: ContentKind
    value: Union[str, bytes]
    mime: Optional[str] = field(default=None, compare=False)

    @classmethod
    def text(cls, value: str) -> "ClipContent":
        return cls(ContentKind.TEXT, value)

    @classmethod
    def url(cls, value: str) -> "ClipContent":
        return cls(ContentKind.URL, value)

    @classmethod
    def image(cls, data: bytes, mime: str = "image/png") -> "ClipContent":
        return cls(ContentKind.IMAGE, bytes(data), mime)

    @property
    def parsed_url(self) -> Optional[SplitResult]:
        if self.kind is not ContentKind.URL:
            return None
        return urlsplit(self.value)

    @property
    def size_bytes(self) -> int:
        if isinstance(self.value, bytes):
            return len(self.value)
        return len(self.value.encode("utf-8"))

    def __repr__(self) -> str:
        if self.kind is ContentKind.IMAGE:
            return f"ClipContent(image, {len(self.value)} bytes)"
        return f"ClipContent({self.kind.value}, {self.value!r})"


@dataclass(frozen=True)
class ClipItem:
    """One entry of the clipboard history."""
    item_id: str
    content: ClipContent
    captured_at: datetime.datetime
    pinned: bool = False

    @classmethod
    def create(
        cls,
        content: ClipContent,
        captured_at: Optional[datetime.datetime] = None,
        pinned: bool = False,
    ) -> "ClipItem":
        captured_at = captured_at or utc_now()
        return cls(
            item_id=str(ULID.from_datetime(captured_at)),
            content=content,
            captured_at=captured_at,
            pinned=pinned,
        )

    def toggled(self) -> "ClipItem":
        return replace(self, pinned=not self.pinned)

    @property
    def kind(self) -> ContentKind:
        return self.content.kind

    @property
    def type_label(self) -> str:
        return self.content.kind.value

    @property
    def icon_name(self) -> str:
        return _ICON_NAMES[self.content.kind]

    @property
    def size_bytes(self) -> int:
        return self.content.size_bytes

    @property
    def preview(self) -> str:
        kind = self.content.kind
        if kind is ContentKind.IMAGE:
            return f"Image ({len(self.content.value) // 1024} KB)"
        if kind is ContentKind.URL:
            return self.content.value

        trimmed = self.content.value.strip()
        if len(trimmed) > PREVIEW_LENGTH:
            return trimmed[:PREVIEW_LENGTH] + "..."
        return trimmed

    def relative_time(self, now: Optional[datetime.datetime] = None) -> str:
        now = now or utc_now()
        seconds = (now - self.captured_at).total_seconds()
        if seconds < 5:
            return "now"
        if seconds < 60:
            return f"{int(seconds)}s ago"
        if seconds < 3600:
            return f"{int(seconds // 60)}m ago"
        if seconds < 86400:
            return f"{int(seconds // 3600)}h ago"
        return f"{int(seconds // 86400)}d ago"

    def matches(self, query: str) -> bool:
        """Case-insensitive search; images only match the word "image"."""
        lowered = query.lower()
        if self.content.kind is ContentKind.IMAGE:
            return lowered in "image"
        return lowered in self.content.value.lower()
