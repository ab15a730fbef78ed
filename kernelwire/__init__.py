"""Building blocks for Jupyter kernels: wire messages, signing, logging and ZeroMQ channels."""

__version__ = "0.23.2"

__all__ = [
    "authentication",
    "config",
    "logger",
    "message",
    "messenger",
    "middleware",
    "publisher",
    "server",
    "shell",
    "system",
]