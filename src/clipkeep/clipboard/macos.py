import logging
from typing import Dict, Optional

try:
    from AppKit import NSPasteboard, NSPasteboardTypePNG, NSPasteboardTypeString, NSPasteboardTypeTIFF
    from Foundation import NSData
    HAS_APPKIT = True
except ImportError:
    HAS_APPKIT = False

from clipkeep.clipboard.base import ClipboardBackend
from clipkeep.models.clip_item import ClipContent, ContentKind
from clipkeep.services.classifier import RasterFormat, RawClipboard

logger = logging.getLogger(__name__)


class MacOSClipboard(ClipboardBackend):
    """NSPasteboard access; the pasteboard change count is the version."""

    def __init__(self) -> None:
        if not HAS_APPKIT:
            logger.warning("pyobjc AppKit bindings are not installed, clipboard is unavailable")

    def current_version(self) -> int:
        if not HAS_APPKIT:
            return 0
        return int(NSPasteboard.generalPasteboard().changeCount())

    def _read(self) -> RawClipboard:
        if not HAS_APPKIT:
            return RawClipboard()

        pasteboard = NSPasteboard.generalPasteboard()
        types = pasteboard.types() or []

        text: Optional[str] = None
        if NSPasteboardTypeString in types:
            value = pasteboard.stringForType_(NSPasteboardTypeString)
            if value is not None:
                text = str(value)

        rasters: Dict[str, bytes] = {}
        for pb_type, fmt in ((NSPasteboardTypePNG, RasterFormat.PNG),
                             (NSPasteboardTypeTIFF, RasterFormat.TIFF)):
            if pb_type in types:
                data = pasteboard.dataForType_(pb_type)
                if data:
                    rasters[fmt] = bytes(data)

        return RawClipboard(text=text, rasters=rasters)

    def _write(self, content: ClipContent) -> bool:
        if not HAS_APPKIT:
            return False

        pasteboard = NSPasteboard.generalPasteboard()
        pasteboard.clearContents()

        if content.kind is ContentKind.IMAGE:
            payload = content.value
            ns_data = NSData.dataWithBytes_length_(payload, len(payload))
            if content.mime == "image/tiff":
                return bool(pasteboard.setData_forType_(ns_data, NSPasteboardTypeTIFF))
            return bool(pasteboard.setData_forType_(ns_data, NSPasteboardTypePNG))

        return bool(pasteboard.setString_forType_(content.value, NSPasteboardTypeString))
