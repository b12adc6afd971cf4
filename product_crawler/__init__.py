"""Product URL discovery across a fixed set of e-commerce origins."""

from .version import __version__

__all__ = ["__version__"]
