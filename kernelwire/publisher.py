"""Forwarder that moves in-process messages out on the iopub socket."""

from __future__ import annotations

import zmq

from .middleware import (
    get_controller_end_point,
    get_publisher_end_point,
    get_socket_linger,
    get_socket_port,
    init_socket,
)

__all__ = ["Publisher"]


class Publisher:
    """Relays messages published in-process to the external iopub socket.

    Other parts of the kernel connect a PUB socket to the in-process
    publisher end point. ``run`` forwards everything it receives there to
    the iopub socket until a message arrives on the publisher controller,
    which is echoed back as the acknowledgement of the stop request.
    """

    def __init__(self, context: zmq.Context, transport: str, ip: str, port: str) -> None:
        self._publisher = context.socket(zmq.PUB)
        self._listener = context.socket(zmq.SUB)
        self._controller = context.socket(zmq.REP)

        init_socket(self._publisher, transport, ip, port)
        self._listener.setsockopt(zmq.SUBSCRIBE, b"")
        self._listener.bind(get_publisher_end_point())
        self._controller.setsockopt(zmq.LINGER, get_socket_linger())
        self._controller.bind(get_controller_end_point("publisher"))

    def get_port(self) -> str:
        """Return the port the iopub socket is bound to."""
        return get_socket_port(self._publisher)

    def run(self) -> None:
        """Forward messages until a stop request arrives on the controller."""
        poller = zmq.Poller()
        poller.register(self._listener, zmq.POLLIN)
        poller.register(self._controller, zmq.POLLIN)

        while True:
            events = dict(poller.poll())

            if events.get(self._listener, 0) & zmq.POLLIN:
                self._publisher.send_multipart(self._listener.recv_multipart())

            if events.get(self._controller, 0) & zmq.POLLIN:
                request = self._controller.recv_multipart()
                self._controller.send_multipart(request)
                break

    def close(self) -> None:
        """Close the sockets."""
        for socket in (self._publisher, self._listener, self._controller):
            socket.close()

    def __enter__(self) -> Publisher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()