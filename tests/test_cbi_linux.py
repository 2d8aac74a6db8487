import subprocess

import pytest

from clipkeep.clipboard import linux
from clipkeep.clipboard.linux import LinuxClipboard
from clipkeep.models import ClipContent
from clipkeep.services.classifier import RasterFormat


class FakeXclip:
    """Stands in for subprocess.run with an xclip-shaped clipboard."""

    def __init__(self):
        self.targets = {}
        self.calls = []

    def set(self, **targets):
        self.targets = targets

    def __call__(self, command, input=None, **kwargs):
        self.calls.append((command, input))
        if "-o" not in command:
            target = command[command.index("-t") + 1] if "-t" in command else "UTF8_STRING"
            self.targets = {target: input}
            return subprocess.CompletedProcess(command, 0, stdout=b"")

        target = command[command.index("-t") + 1]
        if target == "TARGETS":
            stdout = "\n".join(self.targets).encode("utf-8")
        elif target in self.targets:
            stdout = self.targets[target]
        else:
            raise subprocess.CalledProcessError(1, command)
        return subprocess.CompletedProcess(command, 0, stdout=stdout)


@pytest.fixture
def xclip(monkeypatch):
    fake = FakeXclip()
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
    monkeypatch.setattr(linux.shutil, "which", lambda name: "/usr/bin/" + name if name == "xclip" else None)
    monkeypatch.setattr(linux.subprocess, "run", fake)
    return fake


def test_reads_text(xclip):
    xclip.set(TARGETS=b"", UTF8_STRING=b"hello")
    raw = LinuxClipboard().read()
    assert raw.text == "hello"
    assert raw.rasters == {}


def test_reads_images(xclip):
    xclip.set(**{"image/png": b"png-bytes", "image/tiff": b"tiff-bytes"})
    raw = LinuxClipboard().read()
    assert raw.text is None
    assert raw.rasters == {RasterFormat.PNG: b"png-bytes", RasterFormat.TIFF: b"tiff-bytes"}


def test_version_changes_with_content(xclip):
    clipboard = LinuxClipboard()
    xclip.set(UTF8_STRING=b"one")
    first = clipboard.current_version()
    assert clipboard.current_version() == first

    xclip.set(UTF8_STRING=b"two")
    assert clipboard.current_version() == first + 1


def test_write_text_then_version_is_stable(xclip):
    clipboard = LinuxClipboard()
    version = clipboard.write(ClipContent.text("restored"))

    command, payload = xclip.calls[0]
    assert command == ["xclip", "-selection", "clipboard"]
    assert payload == b"restored"
    assert clipboard.current_version() == version


def test_write_image_uses_mime(xclip):
    LinuxClipboard().write(ClipContent.image(b"tiff-bytes", "image/tiff"))
    command, payload = xclip.calls[0]
    assert command[-2:] == ["-t", "image/tiff"]
    assert payload == b"tiff-bytes"


def test_no_clipboard_tool(monkeypatch):
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
    monkeypatch.setattr(linux.shutil, "which", lambda name: None)
    clipboard = LinuxClipboard()
    assert clipboard.read().is_empty
    assert clipboard.write(ClipContent.text("x")) is None


def test_read_after_version_check_reuses_snapshot(xclip):
    clipboard = LinuxClipboard()
    xclip.set(UTF8_STRING=b"checked")
    clipboard.current_version()
    calls = len(xclip.calls)

    xclip.set(UTF8_STRING=b"changed since")
    assert clipboard.read().text == "checked"
    assert len(xclip.calls) == calls

    assert clipboard.read().text == "changed since"
