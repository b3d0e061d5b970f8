"""gwencat — single-file transfer over a raw TCP connection."""

__version__ = "0.1.0"
