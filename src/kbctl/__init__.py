"""kbctl — knowledge-base metadata, link and query engine."""

__version__ = "0.3.0"
