import threading
import time

import pytest
import zmq

from kernelwire.middleware import (
    find_free_port,
    get_controller_end_point,
    get_publisher_end_point,
)
from kernelwire.shell import Shell


class _Recorder:
    def __init__(self):
        self.shell = []
        self.stdin = []
        self.internal = []

    def notify_shell_listener(self, message):
        self.shell.append(message)

    def notify_stdin_listener(self, message):
        self.stdin.append(message)

    def notify_internal_listener(self, message):
        self.internal.append(message)
        return [b"pong"]


@pytest.fixture
def context():
    ctx = zmq.Context()
    yield ctx
    ctx.destroy(linger=0)


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def _make_shell(context, recorder, shell_port="", stdin_port=""):
    return Shell(context, "tcp", "127.0.0.1", shell_port, stdin_port, recorder)


def test_ports_match_explicit_ports(context):
    shell_port = find_free_port()
    stdin_port = find_free_port()
    with _make_shell(context, _Recorder(), shell_port, stdin_port) as shell:
        assert shell.get_shell_port() == shell_port
        assert shell.get_stdin_port() == stdin_port


def test_empty_ports_are_distinct(context):
    with _make_shell(context, _Recorder()) as shell:
        assert shell.get_shell_port().isdigit()
        assert shell.get_stdin_port().isdigit()
        assert shell.get_shell_port() != shell.get_stdin_port()


def test_run_dispatches_shell_and_internal_then_stops(context):
    recorder = _Recorder()
    shell = _make_shell(context, recorder)
    thread = threading.Thread(target=shell.run, daemon=True)
    thread.start()

    client = context.socket(zmq.DEALER)
    client.connect(f"tcp://127.0.0.1:{shell.get_shell_port()}")
    client.send(b"hello")
    assert _wait_for(lambda: recorder.shell)
    assert len(recorder.shell[0]) == 2
    assert recorder.shell[0][-1] == b"hello"

    controller = context.socket(zmq.REQ)
    controller.connect(get_controller_end_point("shell"))
    controller.send(b"ping")
    assert controller.poll(5000)
    assert controller.recv_multipart() == [b"pong"]
    assert recorder.internal == [[b"ping"]]

    controller.send(b"stop")
    assert controller.poll(5000)
    assert controller.recv_multipart() == [b"stop"]
    thread.join(5)
    assert not thread.is_alive()

    client.close(linger=0)
    controller.close(linger=0)
    shell.close()


def test_abort_queue_drains_and_send_shell_replies(context):
    shell = _make_shell(context, _Recorder())
    client = context.socket(zmq.DEALER)
    client.setsockopt(zmq.IDENTITY, b"client")
    client.connect(f"tcp://127.0.0.1:{shell.get_shell_port()}")
    client.send(b"request")

    drained = []
    assert _wait_for(lambda: shell.abort_queue(drained.append, 0) or drained)
    assert drained == [[b"client", b"request"]]

    shell.abort_queue(drained.append, 0)
    assert len(drained) == 1

    shell.send_shell([b"client", b"reply"])
    assert client.poll(5000)
    assert client.recv_multipart() == [b"reply"]

    client.close(linger=0)
    shell.close()


def test_send_stdin_waits_for_reply(context):
    recorder = _Recorder()
    shell = _make_shell(context, recorder)
    client = context.socket(zmq.DEALER)
    client.setsockopt(zmq.IDENTITY, b"frontend")
    client.connect(f"tcp://127.0.0.1:{shell.get_stdin_port()}")
    time.sleep(0.5)

    prompts = []

    def answer():
        if client.poll(5000):
            prompts.append(client.recv_multipart())
            client.send(b"answer")

    responder = threading.Thread(target=answer, daemon=True)
    responder.start()
    shell.send_stdin([b"frontend", b"prompt"])
    responder.join(5)

    assert prompts == [[b"prompt"]]
    assert recorder.stdin == [[b"frontend", b"answer"]]

    client.close(linger=0)
    shell.close()


def test_publish_reaches_publisher_end_point(context):
    listener = context.socket(zmq.SUB)
    listener.setsockopt(zmq.SUBSCRIBE, b"")
    listener.bind(get_publisher_end_point())
    shell = _make_shell(context, _Recorder())

    received = None
    for _ in range(100):
        shell.publish([b"status", b"busy"])
        if listener.poll(100):
            received = listener.recv_multipart()
            break
    assert received == [b"status", b"busy"]

    listener.close(linger=0)
    shell.close()