import logging
from abc import ABC, abstractmethod
from typing import Optional

from clipkeep.models.clip_item import ClipContent
from clipkeep.services.classifier import RawClipboard

logger = logging.getLogger(__name__)


class ClipboardBackend(ABC):
    """System clipboard access used by the poller.

    ``current_version`` returns a marker that changes on every clipboard
    write, ``write`` returns the marker left behind by our own write, or
    None when nothing was written.
    """

    @abstractmethod
    def current_version(self) -> int:
        pass

    @abstractmethod
    def _read(self) -> RawClipboard:
        pass

    @abstractmethod
    def _write(self, content: ClipContent) -> bool:
        pass

    def read(self) -> RawClipboard:
        try:
            return self._read()
        except Exception as e:
            logger.warning(f"Clipboard read failed: {e}")
            return RawClipboard()

    def write(self, content: ClipContent) -> Optional[int]:
        try:
            written = self._write(content)
        except Exception as e:
            logger.error(f"Clipboard write failed: {e}")
            written = False
        if not written:
            logger.warning(f"Could not place {content.kind.value} on the clipboard")
            return None
        return self.current_version()
