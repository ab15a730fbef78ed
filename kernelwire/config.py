"""Kernel connection settings and version information."""

from __future__ import annotations

from dataclasses import dataclass

_VERSION_MAJOR = 0
_VERSION_MINOR = 23
_VERSION_PATCH = 2

_PROTOCOL_VERSION_MAJOR = 5
_PROTOCOL_VERSION_MINOR = 3


@dataclass(slots=True)
class KernelConfiguration:
    """Transport, address, ports and signing settings of a kernel.

    An empty port means that a free port is chosen when the socket is bound.
    """

    transport: str = "tcp"
    ip: str = "127.0.0.1"
    control_port: str = ""
    shell_port: str = ""
    stdin_port: str = ""
    iopub_port: str = ""
    hb_port: str = ""
    signature_scheme: str = "hmac-sha256"
    key: str = ""


def get_protocol_version() -> str:
    """Return the messaging protocol version as "major.minor"."""
    return f"{_PROTOCOL_VERSION_MAJOR}.{_PROTOCOL_VERSION_MINOR}"


def get_version() -> str:
    """Return the library version as "major.minor.patch"."""
    return f"{_VERSION_MAJOR}.{_VERSION_MINOR}.{_VERSION_PATCH}"