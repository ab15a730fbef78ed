"""Loggers that record the messages a kernel receives, sends and publishes."""

from __future__ import annotations

import json
import sys
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, TextIO

from .message import Message, PubMessage

__all__ = [
    "Channel",
    "LogLevel",
    "Logger",
    "NullLogger",
    "CommonLogger",
    "ConsoleLogger",
    "FileLogger",
    "is_utf8_valid",
    "make_console_logger",
    "make_file_logger",
]

_PREFIX = "kernelwire"
_INVALID_ID = "invalid UTF8"


class Channel(Enum):
    """The channel a logged message went through."""

    SHELL = "shell"
    CONTROL = "control"
    STDINPUT = "stdin"
    HEARTBEAT = "heartbeat"


class LogLevel(Enum):
    """How much of each message is written to the log."""

    MSG_TYPE = 0
    CONTENT = 1
    FULL = 2


def is_utf8_valid(data: bytes | str) -> bool:
    """Return True when ``data`` is well-formed UTF-8.

    Overlong forms, surrogates, code points above U+10FFFF and truncated
    sequences are all rejected.
    """
    if isinstance(data, str):
        data = data.encode("utf-8", errors="surrogatepass")
    try:
        bytes(data).decode("utf-8", errors="strict")
    except UnicodeDecodeError:
        return False
    return True


def _dump(value: Any) -> str:
    return json.dumps(value, indent=4, sort_keys=True, ensure_ascii=False)


class Logger(ABC):
    """Base class of message loggers."""

    def log_received_message(self, message: Message, channel: Channel) -> None:
        """Log a message received on ``channel``."""
        self._log_received_message(message, channel)

    def log_sent_message(self, message: Message, channel: Channel) -> None:
        """Log a message sent on ``channel``."""
        self._log_sent_message(message, channel)

    def log_iopub_message(self, message: PubMessage) -> None:
        """Log a message published on iopub."""
        self._log_iopub_message(message)

    def log_message(
        self,
        socket_info: str,
        header: Any,
        parent_header: Any,
        metadata: Any,
        content: Any,
    ) -> None:
        """Log the parts of a message under the description ``socket_info``."""
        self._log_message(socket_info, header, parent_header, metadata, content)

    @abstractmethod
    def _log_received_message(self, message: Message, channel: Channel) -> None:
        """Record a received message."""

    @abstractmethod
    def _log_sent_message(self, message: Message, channel: Channel) -> None:
        """Record a sent message."""

    @abstractmethod
    def _log_iopub_message(self, message: PubMessage) -> None:
        """Record a published message."""

    @abstractmethod
    def _log_message(
        self,
        socket_info: str,
        header: Any,
        parent_header: Any,
        metadata: Any,
        content: Any,
    ) -> None:
        """Record the parts of a message."""


class NullLogger(Logger):
    """A logger that discards everything."""

    def _log_received_message(self, message: Message, channel: Channel) -> None:
        pass

    def _log_sent_message(self, message: Message, channel: Channel) -> None:
        pass

    def _log_iopub_message(self, message: PubMessage) -> None:
        pass

    def _log_message(
        self,
        socket_info: str,
        header: Any,
        parent_header: Any,
        metadata: Any,
        content: Any,
    ) -> None:
        pass


class CommonLogger(Logger):
    """Formats messages according to a level and passes them down a chain.

    Subclasses implement ``_write``, which receives the description of the
    socket and the formatted message. After writing, every message is handed
    to ``next_logger``.
    """

    def __init__(self, level: LogLevel, next_logger: Logger | None = None) -> None:
        self.level = level
        self.next_logger: Logger = next_logger if next_logger is not None else NullLogger()

    @staticmethod
    def _identity_text(message: Message) -> str:
        identity = message.identities[0]
        if is_utf8_valid(identity):
            return identity.decode("utf-8") if isinstance(identity, bytes) else identity
        return _INVALID_ID

    def _log_received_message(self, message: Message, channel: Channel) -> None:
        socket_info = (
            f"{_PREFIX}: received message on {channel.value} - "
            f"{self._identity_text(message)}"
        )
        self.log_message(
            socket_info, message.header, message.parent_header, message.metadata, message.content
        )

    def _log_sent_message(self, message: Message, channel: Channel) -> None:
        socket_info = (
            f"{_PREFIX}: sent message on {channel.value} - "
            f"{self._identity_text(message)}"
        )
        self.log_message(
            socket_info, message.header, message.parent_header, message.metadata, message.content
        )

    def _log_iopub_message(self, message: PubMessage) -> None:
        socket_info = f"{_PREFIX}: sent message on iopub - {message.topic}"
        self.log_message(
            socket_info, message.header, message.parent_header, message.metadata, message.content
        )

    def _log_message(
        self,
        socket_info: str,
        header: Any,
        parent_header: Any,
        metadata: Any,
        content: Any,
    ) -> None:
        message_type = header.get("msg_type", "") if isinstance(header, dict) else ""
        text = f"msg_type: {message_type}"
        if self.level is LogLevel.CONTENT:
            text += "\n" + _dump(content)
        elif self.level is not LogLevel.MSG_TYPE:
            text += "\n" + _dump(
                {
                    "header": header,
                    "parent_header": parent_header,
                    "metadata": metadata,
                    "content": content,
                }
            )
        self._write(socket_info, text)
        self.next_logger.log_message(socket_info, header, parent_header, metadata, content)

    @abstractmethod
    def _write(self, socket_info: str, message: str) -> None:
        """Write one formatted entry."""


class ConsoleLogger(CommonLogger):
    """Writes log entries to a text stream, standard error by default."""

    def __init__(
        self,
        level: LogLevel,
        next_logger: Logger | None = None,
        stream: TextIO | None = None,
    ) -> None:
        super().__init__(level, next_logger)
        self._stream = stream
        self._lock = threading.Lock()

    def _write(self, socket_info: str, message: str) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        with self._lock:
            stream.write(f"{socket_info}\n{message}\n")
            stream.flush()


class FileLogger(CommonLogger):
    """Appends log entries as indented JSON objects to a file."""

    def __init__(
        self, level: LogLevel, file_name: str, next_logger: Logger | None = None
    ) -> None:
        super().__init__(level, next_logger)
        self.file_name = file_name
        self._lock = threading.Lock()

    def _write(self, socket_info: str, message: str) -> None:
        entry = _dump({"info": socket_info, "message": message})
        with self._lock:
            with open(self.file_name, "a", encoding="utf-8") as out:
                out.write(entry)


def make_console_logger(level: LogLevel, next_logger: Logger | None = None) -> Logger:
    """Return a logger writing to standard error, followed by ``next_logger``."""
    return ConsoleLogger(level, next_logger)


def make_file_logger(
    level: LogLevel, file_name: str, next_logger: Logger | None = None
) -> Logger:
    """Return a logger appending to ``file_name``, followed by ``next_logger``."""
    return FileLogger(level, file_name, next_logger)