"""The shell and stdin channels of a kernel running in their own thread."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import zmq

from .middleware import (
    get_controller_end_point,
    get_publisher_end_point,
    get_socket_linger,
    get_socket_port,
    init_socket,
)

if TYPE_CHECKING:
    from .server import Listener, Server

__all__ = ["Shell"]

_STOP = b"stop"


class Shell:
    """Owns the shell and stdin sockets and dispatches their traffic to a server.

    Shell requests are handed to the server's shell listener. Requests on the
    shell controller are answered by the server's internal listener, except
    "stop", which is echoed back and ends ``run``.
    """

    def __init__(
        self,
        context: zmq.Context,
        transport: str,
        ip: str,
        shell_port: str,
        stdin_port: str,
        server: Server,
    ) -> None:
        self._shell = context.socket(zmq.ROUTER)
        self._stdin = context.socket(zmq.ROUTER)
        self._publisher_pub = context.socket(zmq.PUB)
        self._controller = context.socket(zmq.REP)
        self._server = server

        init_socket(self._shell, transport, ip, shell_port)
        init_socket(self._stdin, transport, ip, stdin_port)
        self._publisher_pub.setsockopt(zmq.LINGER, get_socket_linger())
        self._publisher_pub.connect(get_publisher_end_point())

        self._controller.setsockopt(zmq.LINGER, get_socket_linger())
        self._controller.bind(get_controller_end_point("shell"))

    def get_shell_port(self) -> str:
        """Return the port the shell socket is bound to."""
        return get_socket_port(self._shell)

    def get_stdin_port(self) -> str:
        """Return the port the stdin socket is bound to."""
        return get_socket_port(self._stdin)

    def run(self) -> None:
        """Dispatch shell and controller requests until "stop" is received."""
        poller = zmq.Poller()
        poller.register(self._shell, zmq.POLLIN)
        poller.register(self._controller, zmq.POLLIN)

        while True:
            events = dict(poller.poll())

            if events.get(self._shell, 0) & zmq.POLLIN:
                self._server.notify_shell_listener(self._shell.recv_multipart())

            if events.get(self._controller, 0) & zmq.POLLIN:
                request = self._controller.recv_multipart()
                if request and request[0] == _STOP:
                    self._controller.send_multipart(request)
                    break
                reply = self._server.notify_internal_listener(request)
                self._controller.send_multipart(reply)

    def send_shell(self, message: list[bytes]) -> None:
        """Send a multipart message on the shell socket."""
        self._shell.send_multipart(message)

    def send_stdin(self, message: list[bytes]) -> None:
        """Send on stdin, wait for the reply and hand it to the stdin listener."""
        self._stdin.send_multipart(message)
        reply = self._stdin.recv_multipart()
        self._server.notify_stdin_listener(reply)

    def publish(self, message: list[bytes]) -> None:
        """Send a multipart message to the in-process publisher."""
        self._publisher_pub.send_multipart(message)

    def abort_queue(self, listener: Listener, polling_interval: int) -> None:
        """Hand every pending shell request to ``listener``.

        ``polling_interval`` is the pause after each request, in milliseconds.
        Returns as soon as no request is waiting.
        """
        while True:
            try:
                message = self._shell.recv_multipart(zmq.NOBLOCK)
            except zmq.Again:
                return
            listener(message)
            time.sleep(polling_interval / 1000)

    def reply_to_controller(self, message: list[bytes]) -> None:
        """Send a reply on the shell controller socket."""
        self._controller.send_multipart(message)

    def close(self) -> None:
        """Close the sockets."""
        for socket in (self._shell, self._stdin, self._publisher_pub, self._controller):
            socket.close()

    def __enter__(self) -> Shell:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()