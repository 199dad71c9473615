"""Server-authoritative Kalah: rules engine, live game sessions and their HTTP/stream adapter."""

__version__ = "0.1.0"
