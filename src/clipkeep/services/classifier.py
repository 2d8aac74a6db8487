"""Turns raw clipboard reads into typed history content."""

from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urlsplit

from clipkeep.models.clip_item import ClipContent


URL_SCHEMES = frozenset({"http", "https", "ftp", "ssh"})


class RasterFormat:
    PNG = "png"
    TIFF = "tiff"

    MIME = {
        PNG: "image/png",
        TIFF: "image/tiff",
    }

    # first match wins
    PRIORITY = (PNG, TIFF)


@dataclass(frozen=True)
class RawClipboard:
    """What a clipboard backend read: optional text plus raster payloads by format."""
    text: Optional[str] = None
    rasters: Dict[str, bytes] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.text is None and not self.rasters


def _as_url(trimmed: str) -> Optional[ClipContent]:
    if not trimmed or any(ch.isspace() for ch in trimmed):
        return None

    try:
        parsed = urlsplit(trimmed)
        host = parsed.hostname
    except ValueError:
        return None

    if parsed.scheme.lower() not in URL_SCHEMES or not host:
        return None
    return ClipContent.url(trimmed)


def _as_image(rasters: Dict[str, bytes]) -> Optional[ClipContent]:
    for fmt in RasterFormat.PRIORITY:
        data = rasters.get(fmt)
        if data:
            return ClipContent.image(data, RasterFormat.MIME[fmt])
    return None


def classify(raw: RawClipboard) -> Optional[ClipContent]:
    """Classify a clipboard read as url, text or image.

    Text is checked first. The trimmed string is only used to detect urls;
    plain text keeps the original string. Whitespace-only text falls through
    to the raster payloads, where png wins over tiff. Returns None when
    nothing usable is present.
    """
    if raw.text is not None:
        trimmed = raw.text.strip()
        url = _as_url(trimmed)
        if url is not None:
            return url
        if trimmed:
            return ClipContent.text(raw.text)

    return _as_image(raw.rasters)
