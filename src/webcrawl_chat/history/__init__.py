from .index import HistoryIndex

__all__ = ["HistoryIndex"]
