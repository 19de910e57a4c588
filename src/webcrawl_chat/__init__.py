"""Client for a crawl-and-summarize backend: crawl sessions, streamed summaries and chat threads."""

__version__ = "0.1.0"
