import datetime
import sys
from pathlib import Path
from typing import Optional

import pytest

# ensure src is importable without an install
REPO_ROOT = Path(__file__).resolve().parent.parent
SRC = REPO_ROOT / "src"
sys.path.insert(0, str(SRC))

from clipkeep.clipboard.base import ClipboardBackend  # noqa: E402
from clipkeep.models.clip_item import ClipContent, ContentKind  # noqa: E402
from clipkeep.services.classifier import RasterFormat, RawClipboard  # noqa: E402


class FakeClipboard(ClipboardBackend):
    """In-memory clipboard whose change count bumps on every write."""

    def __init__(self) -> None:
        self.change_count = 0
        self.raw = RawClipboard()
        self.writes = []
        self.fail_reads = False
        self.fail_writes = False

    def copy_text(self, text: str) -> None:
        self.raw = RawClipboard(text=text)
        self.change_count += 1

    def copy_image(self, data: bytes, fmt: str = RasterFormat.PNG) -> None:
        self.raw = RawClipboard(rasters={fmt: data})
        self.change_count += 1

    def current_version(self) -> int:
        return self.change_count

    def _read(self) -> RawClipboard:
        if self.fail_reads:
            raise RuntimeError("clipboard busy")
        return self.raw

    def _write(self, content: ClipContent) -> bool:
        if self.fail_writes:
            return False
        self.writes.append(content)
        if content.kind is ContentKind.IMAGE:
            self.copy_image(content.value)
        else:
            self.copy_text(content.value)
        return True


class StepClock:
    """Clock that advances one second per call."""

    def __init__(self, start: Optional[datetime.datetime] = None) -> None:
        self.now = start or datetime.datetime(2024, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)

    def __call__(self) -> datetime.datetime:
        self.now += datetime.timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    return FakeClipboard()
