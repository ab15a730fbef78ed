import io
import json

import pytest

from kernelwire.logger import (
    Channel,
    CommonLogger,
    ConsoleLogger,
    FileLogger,
    LogLevel,
    NullLogger,
    is_utf8_valid,
    make_console_logger,
    make_file_logger,
)
from kernelwire.message import Message, PubMessage


class RecordingLogger(CommonLogger):
    def __init__(self, level, next_logger=None):
        super().__init__(level, next_logger)
        self.entries = []

    def _write(self, socket_info, message):
        self.entries.append((socket_info, message))


class ChainTarget(NullLogger):
    def __init__(self):
        self.calls = []

    def _log_message(self, socket_info, header, parent_header, metadata, content):
        self.calls.append((socket_info, header, parent_header, metadata, content))


HEADER = {"msg_type": "execute_request", "msg_id": "m1"}
PARENT = {"msg_id": "p0"}
METADATA = {"started": "now"}
CONTENT = {"code": "1 + 1", "silent": False}


def make_message(identity=b"client-1"):
    return Message(
        header=dict(HEADER),
        parent_header=dict(PARENT),
        metadata=dict(METADATA),
        content=dict(CONTENT),
        identities=[identity],
    )


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"", True),
        (b"hello", True),
        ("héllo €".encode("utf-8"), True),
        ("\U0001F600".encode("utf-8"), True),
        (b"\xff", False),
        (b"\xc3", False),
        (b"\xc0\x80", False),
        (b"\xed\xa0\x80", False),
        (b"\xf4\x90\x80\x80", False),
    ],
)
def test_is_utf8_valid(data, expected):
    assert is_utf8_valid(data) is expected


def test_is_utf8_valid_accepts_text():
    assert is_utf8_valid("plain text") is True


def test_msg_type_level_writes_only_type():
    logger = RecordingLogger(LogLevel.MSG_TYPE)
    logger.log_received_message(make_message(), Channel.SHELL)
    assert len(logger.entries) == 1
    info, text = logger.entries[0]
    assert text == "msg_type: execute_request"
    assert "received message on shell" in info
    assert info.endswith(" - client-1")


def test_content_level_appends_content_json():
    logger = RecordingLogger(LogLevel.CONTENT)
    logger.log_sent_message(make_message(), Channel.CONTROL)
    info, text = logger.entries[0]
    first, rest = text.split("\n", 1)
    assert first == "msg_type: execute_request"
    assert json.loads(rest) == CONTENT
    assert "sent message on control" in info


def test_full_level_appends_all_parts():
    logger = RecordingLogger(LogLevel.FULL)
    logger.log_received_message(make_message(), Channel.STDINPUT)
    info, text = logger.entries[0]
    _, rest = text.split("\n", 1)
    assert json.loads(rest) == {
        "header": HEADER,
        "parent_header": PARENT,
        "metadata": METADATA,
        "content": CONTENT,
    }
    assert "on stdin" in info


def test_missing_msg_type_is_empty():
    stream = io.StringIO()
    logger = ConsoleLogger(LogLevel.MSG_TYPE, stream=stream)
    logger.log_message("info", {}, {}, {}, {})
    assert stream.getvalue() == "info\nmsg_type: \n"


def test_invalid_identity_is_replaced():
    logger = RecordingLogger(LogLevel.MSG_TYPE)
    logger.log_received_message(make_message(b"\xff\xfe"), Channel.HEARTBEAT)
    info, _ = logger.entries[0]
    assert info.endswith(" - invalid UTF8")
    assert "on heartbeat" in info


def test_missing_identity_raises():
    logger = RecordingLogger(LogLevel.MSG_TYPE)
    message = make_message()
    message.identities = []
    with pytest.raises(IndexError):
        logger.log_received_message(message, Channel.SHELL)


def test_iopub_message_uses_topic():
    logger = RecordingLogger(LogLevel.MSG_TYPE)
    message = PubMessage(header={"msg_type": "stream"}, topic="stream.stdout")
    logger.log_iopub_message(message)
    info, text = logger.entries[0]
    assert info.endswith("sent message on iopub - stream.stdout")
    assert text == "msg_type: stream"


def test_chain_passes_message_to_next_logger():
    target = ChainTarget()
    logger = RecordingLogger(LogLevel.MSG_TYPE, target)
    logger.log_sent_message(make_message(), Channel.SHELL)
    info, _ = logger.entries[0]
    assert target.calls == [(info, HEADER, PARENT, METADATA, CONTENT)]


def test_chain_of_common_loggers():
    second = RecordingLogger(LogLevel.CONTENT)
    first = RecordingLogger(LogLevel.MSG_TYPE, second)
    first.log_received_message(make_message(), Channel.SHELL)
    assert len(second.entries) == 1
    assert second.entries[0][0] == first.entries[0][0]
    assert json.loads(second.entries[0][1].split("\n", 1)[1]) == CONTENT


def test_common_logger_is_abstract():
    with pytest.raises(TypeError):
        CommonLogger(LogLevel.FULL)


def test_console_logger_writes_to_stream():
    stream = io.StringIO()
    logger = ConsoleLogger(LogLevel.MSG_TYPE, stream=stream)
    logger.log_message("socket", HEADER, PARENT, METADATA, CONTENT)
    assert stream.getvalue() == "socket\nmsg_type: execute_request\n"


def test_make_console_logger_writes_to_stderr(capsys):
    logger = make_console_logger(LogLevel.MSG_TYPE)
    logger.log_message("socket", HEADER, PARENT, METADATA, CONTENT)
    captured = capsys.readouterr()
    assert captured.err == "socket\nmsg_type: execute_request\n"
    assert captured.out == ""


def test_file_logger_appends_json_entries(tmp_path):
    path = tmp_path / "kernel.log"
    logger = make_file_logger(LogLevel.CONTENT, str(path))
    logger.log_message("first", HEADER, PARENT, METADATA, CONTENT)
    logger.log_message("second", {"msg_type": "kernel_info_request"}, {}, {}, {})

    text = path.read_text(encoding="utf-8")
    decoder = json.JSONDecoder()
    entry1, end = decoder.raw_decode(text)
    entry2, end2 = decoder.raw_decode(text, end)
    assert end2 == len(text)

    assert entry1["info"] == "first"
    header_line, body = entry1["message"].split("\n", 1)
    assert header_line == "msg_type: execute_request"
    assert json.loads(body) == CONTENT
    assert entry2["info"] == "second"
    assert entry2["message"].startswith("msg_type: kernel_info_request")


def test_file_logger_entry_is_indented_object(tmp_path):
    path = tmp_path / "kernel.log"
    logger = FileLogger(LogLevel.MSG_TYPE, str(path))
    logger.log_message("info", {"msg_type": "x"}, {}, {}, {})
    text = path.read_text(encoding="utf-8")
    assert text.startswith("{\n    ")
    assert json.loads(text) == {"info": "info", "message": "msg_type: x"}


def test_file_logger_chains_to_console(tmp_path):
    stream = io.StringIO()
    console = ConsoleLogger(LogLevel.MSG_TYPE, stream=stream)
    path = tmp_path / "kernel.log"
    logger = make_file_logger(LogLevel.FULL, str(path), console)
    logger.log_message("socket", HEADER, PARENT, METADATA, CONTENT)
    assert stream.getvalue() == "socket\nmsg_type: execute_request\n"
    assert json.loads(path.read_text(encoding="utf-8"))["info"] == "socket"