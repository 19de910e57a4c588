from .thread_store import ChatThreadStore

__all__ = ["ChatThreadStore"]
