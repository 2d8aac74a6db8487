import hashlib
import logging
import os
import shutil
import subprocess
from typing import Callable, Dict, List, Optional

from clipkeep.clipboard.base import ClipboardBackend
from clipkeep.models.clip_item import ClipContent, ContentKind
from clipkeep.services.classifier import RasterFormat, RawClipboard

logger = logging.getLogger(__name__)


class LinuxClipboard(ClipboardBackend):
    """Clipboard access through wl-clipboard (Wayland) or xclip (X11).

    Neither tool exposes a change counter, so the version is a local
    counter bumped whenever the digest of what we read changes. The read
    behind a version check is kept and handed to the next ``read()``, so a
    marker and its content always come from the same snapshot.
    """

    _IMAGE_TARGETS = {
        "image/png": RasterFormat.PNG,
        "image/tiff": RasterFormat.TIFF,
    }
    _TEXT_TARGETS = (
        "text/plain;charset=utf-8",
        "text/plain;charset=utf8",
        "utf8_string",
        "text/plain",
        "string",
    )

    def __init__(self) -> None:
        self._version = 0
        self._last_digest: Optional[str] = None
        self._snapshot: Optional[RawClipboard] = None

    def current_version(self) -> int:
        try:
            raw = self._read_clipboard()
        except Exception as e:
            logger.warning(f"Clipboard read failed: {e}")
            raw = RawClipboard()
        self._snapshot = raw
        digest = self._digest(raw)
        if digest != self._last_digest:
            self._last_digest = digest
            self._version += 1
        return self._version

    def _read(self) -> RawClipboard:
        if self._snapshot is not None:
            raw, self._snapshot = self._snapshot, None
            return raw
        return self._read_clipboard()

    def _read_clipboard(self) -> RawClipboard:
        strategies = (
            self._from_wayland,
            self._from_xclip,
        )

        for strategy in strategies:
            result = strategy()
            if result is not None:
                return result

        return RawClipboard()

    def _from_wayland(self) -> Optional[RawClipboard]:
        if not os.environ.get("WAYLAND_DISPLAY") or not shutil.which("wl-paste"):
            return None

        types = self._parse_type_list(
            self._run_command(["wl-paste", "--list-types"], timeout=1.5)
        )

        def reader(target: str) -> Optional[bytes]:
            command = ["wl-paste", "--type", target]
            if target.lower().startswith("text/"):
                command.append("--no-newline")
            return self._run_command(command, timeout=1.5)

        return self._extract_from_types(types, reader)

    def _from_xclip(self) -> Optional[RawClipboard]:
        if not shutil.which("xclip"):
            return None

        types = self._parse_type_list(
            self._run_command(
                ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"],
                timeout=1.5,
            )
        )

        def reader(target: str) -> Optional[bytes]:
            return self._run_command(
                ["xclip", "-selection", "clipboard", "-t", target, "-o"],
                timeout=1.5,
            )

        return self._extract_from_types(types, reader)

    def _extract_from_types(
        self,
        types: List[str],
        reader: Callable[[str], Optional[bytes]],
    ) -> RawClipboard:
        lowered = {target.lower(): target for target in types}

        text: Optional[str] = None
        for target in self._TEXT_TARGETS:
            if target in lowered:
                data = reader(lowered[target])
                if data is not None:
                    text = data.decode("utf-8", errors="ignore")
                    break

        rasters: Dict[str, bytes] = {}
        for target, fmt in self._IMAGE_TARGETS.items():
            if target in lowered:
                data = reader(lowered[target])
                if data:
                    rasters[fmt] = data

        return RawClipboard(text=text, rasters=rasters)

    def _parse_type_list(self, data: Optional[bytes]) -> List[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _run_command(self, command: List[str], timeout: float) -> Optional[bytes]:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=timeout,
            )
            return result.stdout
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
            return None

    @staticmethod
    def _digest(raw: RawClipboard) -> str:
        digest = hashlib.md5()
        if raw.text is not None:
            digest.update(b"text:" + raw.text.encode("utf-8"))
        for fmt in sorted(raw.rasters):
            digest.update(fmt.encode("utf-8") + b":" + raw.rasters[fmt])
        return digest.hexdigest()

    def _write(self, content: ClipContent) -> bool:
        if content.kind is ContentKind.IMAGE:
            mime = content.mime or "image/png"
            payload = content.value
        else:
            mime = None
            payload = content.value.encode("utf-8")

        if shutil.which("wl-copy") and os.environ.get("WAYLAND_DISPLAY"):
            command = ["wl-copy"]
            if mime:
                command += ["--type", mime]
        elif shutil.which("xclip"):
            command = ["xclip", "-selection", "clipboard"]
            if mime:
                command += ["-t", mime]
        else:
            return False

        try:
            subprocess.run(command, input=payload, check=True, timeout=2.0)
            return True
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
            return False
