from .renderer import StreamRenderer, RenderTask, DEFAULT_TICK_INTERVAL

__all__ = ["StreamRenderer", "RenderTask", "DEFAULT_TICK_INTERVAL"]
