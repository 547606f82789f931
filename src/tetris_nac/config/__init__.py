from .base import ConfigBase, normalize_tag

__all__ = ["ConfigBase", "normalize_tag"]
