import logging
import threading
from typing import Callable, Optional

from clipkeep.clipboard.base import ClipboardBackend
from clipkeep.models.clip_item import ClipItem
from clipkeep.services.history_store import HistoryStore

logger = logging.getLogger(__name__)


POLL_INTERVAL = 0.5


class ClipboardService:
    """Polls a clipboard backend and feeds changes into a HistoryStore.

    Polling and copying back go through the same lock, so a write and the
    marker resync it produces are never split by a poll.
    """

    def __init__(
        self,
        store: HistoryStore,
        backend: ClipboardBackend,
        poll_interval: float = POLL_INTERVAL,
        on_capture: Optional[Callable[[ClipItem], None]] = None,
        auto_register: bool = False,
    ) -> None:
        self.store = store
        self.backend = backend
        self.poll_interval = poll_interval
        self._on_capture = on_capture or self._default_handler
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self._is_running = False

        if auto_register:
            self.start()

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        with self._lock:
            if self._is_running:
                return

            # whatever is on the clipboard at launch is not history
            self.store.sync_version(self.backend.current_version())

            self._stop_event.clear()
            self._is_running = True
            self._poll_thread = threading.Thread(
                target=self._poll_loop, daemon=True)
            self._poll_thread.start()

    def stop(self) -> None:
        with self._lock:
            if not self._is_running:
                return

            self._is_running = False
            self._stop_event.set()

        if self._poll_thread is not None:
            self._poll_thread.join(timeout=1.0)
            self._poll_thread = None

    def run_forever(self) -> None:
        try:
            if not self._is_running:
                self.start()

            while not self._stop_event.wait(timeout=self.poll_interval):
                continue
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def poll_once(self) -> Optional[ClipItem]:
        with self._lock:
            version = self.backend.current_version()
            if self.store.is_current(version):
                return None
            item = self.store.observe(version, self.backend.read())

        if item is not None:
            logger.info(f"Clipboard copied: {item.type_label}")
            try:
                self._on_capture(item)
            except Exception as e:
                logger.error(f"Error in on_capture: {e}")
        return item

    def copy_to_clipboard(self, item_id: str) -> bool:
        """Put a history item back on the system clipboard without recapturing it."""
        item = self.store.get(item_id)
        if item is None:
            return False

        with self._lock:
            version = self.backend.write(item.content)
            if version is None:
                return False
            self.store.write_back(version)
        logger.info(f"Restored {item.type_label} item to clipboard")
        return True

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Clipboard poll failed: {e}")
            self._stop_event.wait(self.poll_interval)

    @staticmethod
    def _default_handler(item: ClipItem) -> None:
        pass

    def __enter__(self) -> "ClipboardService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
