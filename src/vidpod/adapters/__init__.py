"""Adapters implementing the collaborator interfaces in ``vidpod.domain.interfaces``."""

from .renderers.text_renderer import PlainTextRenderer
from .yaml_directory import YamlDirectory

__all__ = ["PlainTextRenderer", "YamlDirectory"]
