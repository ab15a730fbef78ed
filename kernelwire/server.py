"""Abstract kernel server: channel dispatch and listener registration."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from .config import KernelConfiguration, get_version

if TYPE_CHECKING:
    from .messenger import ControlMessenger

__all__ = ["ServerChannel", "Server", "Listener", "InternalListener"]

Listener = Callable[[list[bytes]], None]
InternalListener = Callable[[list[bytes]], list[bytes]]


class ServerChannel(Enum):
    """The channel a published message originates from."""

    SHELL = "shell"
    CONTROL = "control"


class Server(ABC):
    """Base class of kernel servers.

    A server moves multipart messages (lists of byte frames) between the
    sockets of the kernel and the listeners registered on it. Subclasses
    provide the transport by implementing the underscored methods.
    """

    def __init__(self) -> None:
        self._shell_listener: Listener | None = None
        self._control_listener: Listener | None = None
        self._stdin_listener: Listener | None = None
        self._internal_listener: InternalListener | None = None

    def get_control_messenger(self) -> ControlMessenger:
        """Return the messenger the control channel uses to reach the shell."""
        return self._get_control_messenger()

    def send_shell(self, message: list[bytes]) -> None:
        """Send a multipart message on the shell channel."""
        self._send_shell(message)

    def send_control(self, message: list[bytes]) -> None:
        """Send a multipart message on the control channel."""
        self._send_control(message)

    def send_stdin(self, message: list[bytes]) -> None:
        """Send a multipart message on the stdin channel."""
        self._send_stdin(message)

    def publish(self, message: list[bytes], channel: ServerChannel) -> None:
        """Publish a multipart message on iopub on behalf of ``channel``."""
        self._publish(message, channel)

    def start(self, message: list[bytes]) -> None:
        """Announce the version on standard error, then run the server."""
        print(f"Run with version {get_version()}", file=sys.stderr, flush=True)
        self._start(message)

    def abort_queue(self, listener: Listener, polling_interval: int) -> None:
        """Drain pending shell requests into ``listener``.

        ``polling_interval`` is the pause between two requests, in milliseconds.
        """
        self._abort_queue(listener, polling_interval)

    def stop(self) -> None:
        """Ask the server to stop."""
        self._stop()

    def update_config(self, config: KernelConfiguration) -> None:
        """Write the ports actually bound into ``config``."""
        self._update_config(config)

    def register_shell_listener(self, listener: Listener) -> None:
        """Set the callable that receives shell requests."""
        self._shell_listener = listener

    def register_control_listener(self, listener: Listener) -> None:
        """Set the callable that receives control requests."""
        self._control_listener = listener

    def register_stdin_listener(self, listener: Listener) -> None:
        """Set the callable that receives stdin replies."""
        self._stdin_listener = listener

    def register_internal_listener(self, listener: InternalListener) -> None:
        """Set the callable that answers internal requests."""
        self._internal_listener = listener

    @staticmethod
    def _require(listener: Callable | None, name: str) -> Callable:
        if listener is None:
            raise RuntimeError(f"no {name} listener registered")
        return listener

    def notify_shell_listener(self, message: list[bytes]) -> None:
        """Hand a shell request to the shell listener."""
        self._require(self._shell_listener, "shell")(message)

    def notify_control_listener(self, message: list[bytes]) -> None:
        """Hand a control request to the control listener."""
        self._require(self._control_listener, "control")(message)

    def notify_stdin_listener(self, message: list[bytes]) -> None:
        """Hand a stdin reply to the stdin listener."""
        self._require(self._stdin_listener, "stdin")(message)

    def notify_internal_listener(self, message: list[bytes]) -> list[bytes]:
        """Hand an internal request to the internal listener and return its reply."""
        return self._require(self._internal_listener, "internal")(message)

    @abstractmethod
    def _get_control_messenger(self) -> ControlMessenger:
        """Return the control messenger."""

    @abstractmethod
    def _send_shell(self, message: list[bytes]) -> None:
        """Send on the shell socket."""

    @abstractmethod
    def _send_control(self, message: list[bytes]) -> None:
        """Send on the control socket."""

    @abstractmethod
    def _send_stdin(self, message: list[bytes]) -> None:
        """Send on the stdin socket."""

    @abstractmethod
    def _publish(self, message: list[bytes], channel: ServerChannel) -> None:
        """Publish on iopub."""

    @abstractmethod
    def _start(self, message: list[bytes]) -> None:
        """Run the server."""

    @abstractmethod
    def _abort_queue(self, listener: Listener, polling_interval: int) -> None:
        """Drain pending shell requests."""

    @abstractmethod
    def _stop(self) -> None:
        """Request the server to stop."""

    @abstractmethod
    def _update_config(self, config: KernelConfiguration) -> None:
        """Write bound ports into the configuration."""