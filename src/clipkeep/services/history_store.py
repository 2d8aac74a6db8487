import datetime
import logging
import threading
from typing import Callable, Hashable, List, Optional

from clipkeep.models.clip_item import ClipItem, utc_now
from clipkeep.models.view import ClipItemView
from clipkeep.services.classifier import RawClipboard, classify

logger = logging.getLogger(__name__)


MAX_ITEMS = 50

_UNSEEN = object()


class HistoryStore:
    """Ordered, deduplicated and bounded clipboard history.

    Items are kept pinned first, then unpinned, each group newest first.
    Every mutation runs under a single lock and every read returns a new
    list, so callers can iterate a result while the poller keeps capturing.
    """

    def __init__(
        self,
        max_items: int = MAX_ITEMS,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ) -> None:
        if max_items < 1:
            raise ValueError(f"max_items must be at least 1, got {max_items}")

        self.max_items = max_items
        self._clock = clock or utc_now
        self._lock = threading.RLock()
        self._items: List[ClipItem] = []
        self._last_version: Hashable = _UNSEEN

    # -- reads --------------------------------------------------------

    @property
    def items(self) -> List[ClipItem]:
        with self._lock:
            return list(self._items)

    @property
    def pinned_count(self) -> int:
        with self._lock:
            return self._pinned_count()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get(self, item_id: str) -> Optional[ClipItem]:
        with self._lock:
            index = self._index_of(item_id)
            return None if index is None else self._items[index]

    def filter(self, query: str) -> List[ClipItem]:
        with self._lock:
            if not query:
                return list(self._items)
            return [item for item in self._items if item.matches(query)]

    def views(self, query: str = "") -> List[ClipItemView]:
        now = self._clock()
        return [ClipItemView.from_item(item, now) for item in self.filter(query)]

    # -- version marker -----------------------------------------------

    def is_current(self, version: Hashable) -> bool:
        with self._lock:
            return version == self._last_version

    def sync_version(self, version: Hashable) -> None:
        with self._lock:
            self._last_version = version

    def write_back(self, version: Hashable) -> None:
        """Record the marker produced by our own clipboard write so it is not captured."""
        self.sync_version(version)

    # -- mutations ----------------------------------------------------

    def observe(self, version: Hashable, raw: RawClipboard) -> Optional[ClipItem]:
        with self._lock:
            if self.is_current(version):
                return None
            self._last_version = version

            content = classify(raw)
            if content is None:
                logger.debug(f"Clipboard change {version!r} had no usable content")
                return None

            item = ClipItem.create(content, captured_at=self._clock())
            self.insert(item)
            logger.debug(f"Captured {item.type_label} item {item.item_id}")
            return item

    def insert(self, item: ClipItem) -> None:
        with self._lock:
            self._items = [
                existing for existing in self._items
                if existing.pinned or existing.content != item.content
            ]
            self._items.insert(self._pinned_count(), item)
            if item.pinned:
                self._sort()
            self.trim()

    def trim(self) -> None:
        with self._lock:
            while len(self._items) > self.max_items:
                index = self._oldest_index(pinned=False)
                if index is None:
                    # everything is pinned; capacity still wins
                    index = self._oldest_index(pinned=True)
                evicted = self._items.pop(index)
                logger.debug(f"Evicted {evicted.type_label} item {evicted.item_id} (pinned={evicted.pinned})")

    def toggle_pin(self, item_id: str) -> Optional[ClipItem]:
        with self._lock:
            index = self._index_of(item_id)
            if index is None:
                return None

            item = self._items[index].toggled()
            self._items[index] = item
            self._sort()
            return item

    def remove(self, item_id: str) -> None:
        with self._lock:
            self._items = [item for item in self._items if item.item_id != item_id]

    def clear_unpinned(self) -> None:
        with self._lock:
            self._items = [item for item in self._items if item.pinned]

    def clear_all(self) -> None:
        with self._lock:
            self._items = []

    # -- helpers ------------------------------------------------------

    def _pinned_count(self) -> int:
        count = 0
        for item in self._items:
            if not item.pinned:
                break
            count += 1
        return count

    def _oldest_index(self, pinned: bool) -> Optional[int]:
        # ties go to the entry further down the list
        oldest = None
        for index, item in enumerate(self._items):
            if item.pinned != pinned:
                continue
            if oldest is None or item.captured_at <= self._items[oldest].captured_at:
                oldest = index
        return oldest

    def _index_of(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.item_id == item_id:
                return index
        return None

    def _sort(self) -> None:
        self._items.sort(key=lambda item: item.captured_at, reverse=True)
        self._items.sort(key=lambda item: not item.pinned)
