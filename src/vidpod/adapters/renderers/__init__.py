from .text_renderer import PlainTextRenderer

__all__ = ["PlainTextRenderer"]
