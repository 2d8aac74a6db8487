import io
import logging
import time
from typing import Dict, Optional

import win32clipboard as wc
import win32con
from PIL import Image, ImageGrab

from clipkeep.clipboard.base import ClipboardBackend
from clipkeep.models.clip_item import ClipContent, ContentKind
from clipkeep.services.classifier import RasterFormat, RawClipboard

logger = logging.getLogger(__name__)


class WindowsClipboard(ClipboardBackend):
    """win32 clipboard access; the clipboard sequence number is the version."""

    def __init__(self) -> None:
        self._png_format = wc.RegisterClipboardFormat("PNG")

    def current_version(self) -> int:
        return int(wc.GetClipboardSequenceNumber())

    def _open(self) -> bool:
        for _ in range(3):
            try:
                wc.OpenClipboard()
                return True
            except Exception:
                time.sleep(0.05)
        return False

    def _read(self) -> RawClipboard:
        text: Optional[str] = None
        rasters: Dict[str, bytes] = {}

        if not self._open():
            logger.warning("Clipboard is locked by another process")
            return RawClipboard()

        try:
            if wc.IsClipboardFormatAvailable(wc.CF_UNICODETEXT):
                text = wc.GetClipboardData(wc.CF_UNICODETEXT)
            if wc.IsClipboardFormatAvailable(self._png_format):
                data = wc.GetClipboardData(self._png_format)
                if data:
                    rasters[RasterFormat.PNG] = bytes(data)
        finally:
            wc.CloseClipboard()

        if not rasters:
            png = self._from_imagegrab()
            if png:
                rasters[RasterFormat.PNG] = png

        return RawClipboard(text=text, rasters=rasters)

    def _from_imagegrab(self) -> Optional[bytes]:
        try:
            clipboard_data = ImageGrab.grabclipboard()
        except Exception:
            return None

        # file lists come back as a list of paths
        if clipboard_data is None or not hasattr(clipboard_data, "save"):
            return None

        output = io.BytesIO()
        clipboard_data.save(output, format="PNG")
        return output.getvalue()

    def _to_dib(self, payload: bytes) -> Optional[bytes]:
        image = Image.open(io.BytesIO(payload))

        if image.mode == "RGBA":
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")

        output = io.BytesIO()
        image.save(output, "BMP")
        bmp_data = output.getvalue()

        # strip the 14 byte BITMAPFILEHEADER
        if len(bmp_data) > 14:
            return bmp_data[14:]
        return None

    def _write(self, content: ClipContent) -> bool:
        dib_data = None
        if content.kind is ContentKind.IMAGE:
            dib_data = self._to_dib(content.value)
            if dib_data is None:
                return False

        if not self._open():
            return False

        try:
            wc.EmptyClipboard()
            if content.kind is ContentKind.IMAGE:
                wc.SetClipboardData(win32con.CF_DIB, dib_data)
                if content.mime == "image/png":
                    wc.SetClipboardData(self._png_format, content.value)
            else:
                wc.SetClipboardData(wc.CF_UNICODETEXT, content.value)
            return True
        finally:
            wc.CloseClipboard()
