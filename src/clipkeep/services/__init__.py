"""Service layer for clipkeep."""

from .classifier import RawClipboard, classify
from .history_store import MAX_ITEMS, HistoryStore

__all__ = ["HistoryStore", "MAX_ITEMS", "RawClipboard", "classify"]
