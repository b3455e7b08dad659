"""kblog: content backend for a server-rendered blog."""

__version__ = "0.4.0"
