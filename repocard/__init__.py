"""Repository preview cards and a cached star counter for GitHub."""

__version__ = "0.1.0"
