"""End points and socket setup for the kernel channels."""

from __future__ import annotations

import random

import zmq

_FREE_PORT_TRANSPORT = "tcp"
_FREE_PORT_IP = "127.0.0.1"


def get_controller_end_point(channel: str) -> str:
    """Return the in-process end point that controls ``channel``."""
    return f"inproc://{channel}_controller"


def get_publisher_end_point() -> str:
    """Return the in-process end point the publisher listens on."""
    return "inproc://publisher"


def get_end_point(transport: str, ip: str, port: str) -> str:
    """Build an end point; tcp separates address and port with ":", others with "-"."""
    sep = ":" if transport == "tcp" else "-"
    return f"{transport}://{ip}{sep}{port}"


def get_socket_linger() -> int:
    """Return the linger period of the kernel sockets, in milliseconds."""
    return 1000


def _bind_random_port(
    socket: zmq.Socket, transport: str, ip: str, max_tries: int, start: int, stop: int
) -> str:
    """Bind to a random port in [start, stop]; return it, or "" when all tries fail."""
    rng = random.SystemRandom()
    for _ in range(max_tries):
        port = str(rng.randint(start, stop))
        try:
            socket.bind(get_end_point(transport, ip, port))
        except zmq.ZMQError:
            continue
        return port
    return ""


def init_socket(socket: zmq.Socket, transport: str, ip: str, port: str) -> None:
    """Set the linger period and bind; an empty port picks a free one."""
    socket.setsockopt(zmq.LINGER, get_socket_linger())
    if port:
        socket.bind(get_end_point(transport, ip, port))
    else:
        _bind_random_port(socket, transport, ip, 100, 49152, 65536)


def bind_socket(socket: zmq.Socket, end_point: str) -> None:
    """Set the linger period and bind to ``end_point``."""
    socket.setsockopt(zmq.LINGER, get_socket_linger())
    socket.bind(end_point)


def get_socket_port(socket: zmq.Socket) -> str:
    """Return the port of the end point the socket was last bound to."""
    raw = socket.getsockopt(zmq.LAST_ENDPOINT)
    end_point = raw.decode() if isinstance(raw, bytes) else str(raw)
    end_point = end_point.rstrip("\0")
    return end_point[end_point.rfind(":") + 1 :]


def find_free_port(max_tries: int = 100, start: int = 49152, stop: int = 65536) -> str:
    """Return a tcp port on 127.0.0.1 that could be bound.

    Raises RuntimeError when no port could be bound within ``max_tries``.
    """
    context = zmq.Context()
    try:
        socket = context.socket(zmq.REQ)
        try:
            port = _bind_random_port(
                socket, _FREE_PORT_TRANSPORT, _FREE_PORT_IP, max_tries, start, stop
            )
            if not port:
                raise RuntimeError(
                    f"no free port found in [{start}, {stop}] after {max_tries} tries"
                )
            socket.unbind(get_end_point(_FREE_PORT_TRANSPORT, _FREE_PORT_IP, port))
            return port
        finally:
            socket.close(linger=0)
    finally:
        context.term()