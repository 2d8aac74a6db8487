from clipkeep.clipboard.base import ClipboardBackend
from clipkeep.clipboard.factory import get_clipboard, get_clipboard_class

__all__ = [
    'ClipboardBackend',
    'get_clipboard',
    'get_clipboard_class',
]
