"""Messengers through which the control channel talks to the shell."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import zmq

from .middleware import get_controller_end_point, get_socket_linger

if TYPE_CHECKING:
    from .server import Server

__all__ = ["ControlMessenger", "TrivialMessenger", "ZmqMessenger"]

_STOP = b"stop"


def _encode(message: Any) -> bytes:
    return json.dumps(message, separators=(",", ":")).encode("utf-8")


def _decode_reply(frames: list[bytes]) -> Any:
    if not frames:
        raise RuntimeError("empty reply from the shell")
    return json.loads(bytes(frames[0]).decode("utf-8"))


class ControlMessenger(ABC):
    """Sends JSON requests to the shell and returns its JSON replies."""

    def send_to_shell(self, message: Any) -> Any:
        """Send ``message`` to the shell and return the decoded reply."""
        return self._send_to_shell(message)

    @abstractmethod
    def _send_to_shell(self, message: Any) -> Any:
        """Deliver a request and return the reply."""


class TrivialMessenger(ControlMessenger):
    """Reaches the shell by calling the server's internal listener directly."""

    def __init__(self, server: Server) -> None:
        self._server = server

    def _send_to_shell(self, message: Any) -> Any:
        reply = self._server.notify_internal_listener([_encode(message)])
        return _decode_reply(reply)


class ZmqMessenger(ControlMessenger):
    """Reaches the shell, publisher and heartbeat through in-process sockets."""

    def __init__(self, context: zmq.Context) -> None:
        self._shell_controller = context.socket(zmq.REQ)
        self._publisher_controller = context.socket(zmq.REQ)
        self._heartbeat_controller = context.socket(zmq.REQ)

    def _controllers(self) -> list[tuple[zmq.Socket, str]]:
        return [
            (self._shell_controller, "shell"),
            (self._publisher_controller, "publisher"),
            (self._heartbeat_controller, "heartbeat"),
        ]

    def connect(self) -> None:
        """Connect to the shell, publisher and heartbeat controllers."""
        linger = get_socket_linger()
        for socket, channel in self._controllers():
            socket.setsockopt(zmq.LINGER, linger)
            socket.connect(get_controller_end_point(channel))

    def stop_channels(self) -> None:
        """Ask the shell, publisher and heartbeat to stop, waiting for each answer."""
        for socket, _ in self._controllers():
            socket.send(_STOP)
            socket.recv()

    def close(self) -> None:
        """Close the controller sockets."""
        for socket, _ in self._controllers():
            socket.close()

    def __enter__(self) -> ZmqMessenger:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send_to_shell(self, message: Any) -> Any:
        self._shell_controller.send_multipart([_encode(message)])
        return _decode_reply(self._shell_controller.recv_multipart())