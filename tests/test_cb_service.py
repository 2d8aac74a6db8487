import logging
import time

from clipkeep.models import ClipContent
from clipkeep.services.classifier import RasterFormat
from clipkeep.services.clipboard_service import ClipboardService
from clipkeep.services.history_store import HistoryStore


def make_service(fake_clipboard, clock, **kwargs) -> ClipboardService:
    return ClipboardService(HistoryStore(clock=clock), fake_clipboard, **kwargs)


def test_poll_once_captures_changes(fake_clipboard, clock):
    service = make_service(fake_clipboard, clock)

    fake_clipboard.copy_text("first")
    item = service.poll_once()
    assert item.content == ClipContent.text("first")

    assert service.poll_once() is None
    assert len(service.store) == 1

    fake_clipboard.copy_image(b"\x89PNG", RasterFormat.PNG)
    assert service.poll_once().content == ClipContent.image(b"\x89PNG")
    assert [i.type_label for i in service.store.items] == ["image", "text"]


def test_start_skips_existing_clipboard_content(fake_clipboard, clock):
    fake_clipboard.copy_text("already there")
    service = make_service(fake_clipboard, clock, poll_interval=10.0)
    service.start()
    try:
        assert service.is_running
        assert service.poll_once() is None
        assert len(service.store) == 0
    finally:
        service.stop()
    assert not service.is_running


def test_on_capture_callback(fake_clipboard, clock):
    captured = []
    service = make_service(fake_clipboard, clock, on_capture=captured.append)

    fake_clipboard.copy_text("hello")
    service.poll_once()
    assert [item.content.value for item in captured] == ["hello"]


def test_on_capture_errors_are_logged(fake_clipboard, clock, caplog):
    def broken(item):
        raise RuntimeError("boom")

    service = make_service(fake_clipboard, clock, on_capture=broken)
    fake_clipboard.copy_text("hello")

    with caplog.at_level(logging.ERROR):
        item = service.poll_once()

    assert item is not None
    assert len(service.store) == 1
    assert "boom" in caplog.text


def test_failed_read_captures_nothing(fake_clipboard, clock):
    service = make_service(fake_clipboard, clock)
    fake_clipboard.fail_reads = True
    fake_clipboard.copy_text("unreadable")

    assert service.poll_once() is None
    assert len(service.store) == 0


def test_copy_to_clipboard_is_not_recaptured(fake_clipboard, clock):
    service = make_service(fake_clipboard, clock)

    fake_clipboard.copy_text("one")
    first = service.poll_once()
    fake_clipboard.copy_text("two")
    service.poll_once()

    assert service.copy_to_clipboard(first.item_id)
    assert fake_clipboard.writes == [ClipContent.text("one")]
    assert service.poll_once() is None
    assert [item.content.value for item in service.store.items] == ["two", "one"]


def test_copy_unknown_item(fake_clipboard, clock):
    service = make_service(fake_clipboard, clock)
    assert service.copy_to_clipboard("missing") is False
    assert fake_clipboard.writes == []


def test_background_polling(fake_clipboard, clock):
    with make_service(fake_clipboard, clock, poll_interval=0.01) as service:
        fake_clipboard.copy_text("from the thread")
        deadline = time.monotonic() + 2.0
        while len(service.store) == 0 and time.monotonic() < deadline:
            time.sleep(0.01)

    assert [item.content.value for item in service.store.items] == ["from the thread"]
    assert not service.is_running


def test_failed_copy_does_not_hide_external_change(fake_clipboard, clock):
    service = make_service(fake_clipboard, clock)

    fake_clipboard.copy_text("one")
    first = service.poll_once()

    fake_clipboard.fail_writes = True
    fake_clipboard.copy_text("external")
    assert service.copy_to_clipboard(first.item_id) is False

    captured = service.poll_once()
    assert captured.content == ClipContent.text("external")
    assert [item.content.value for item in service.store.items] == ["external", "one"]
