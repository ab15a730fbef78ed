"""Kernel messages and their multipart wire representation."""

from __future__ import annotations

import json
import time
import uuid
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

from .authentication import Authentication
from .config import get_protocol_version

__all__ = [
    "MessageError",
    "MessageBase",
    "Message",
    "PubMessage",
    "iso8601_now",
    "make_header",
]


class MessageError(RuntimeError):
    """Raised when a wire message cannot be decoded or fails verification."""


def _dump(value: Any) -> bytes:
    return json.dumps(
        value, separators=(",", ":"), sort_keys=True, ensure_ascii=False
    ).encode("utf-8")


def _parse(frame: bytes) -> Any:
    try:
        return json.loads(frame.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MessageError(f"Invalid JSON frame: {exc}") from exc


@dataclass
class MessageBase:
    """The JSON parts and binary buffers shared by every kind of message."""

    header: Any = field(default_factory=dict)
    parent_header: Any = field(default_factory=dict)
    metadata: Any = field(default_factory=dict)
    content: Any = field(default_factory=dict)
    buffers: list[bytes] = field(default_factory=list)

    DELIMITER: ClassVar[bytes] = b"<IDS|MSG>"

    @classmethod
    def is_delimiter(cls, frame: bytes) -> bool:
        """Return True when ``frame`` is the identities/message delimiter."""
        return bytes(frame) == cls.DELIMITER

    def _body_frames(self, auth: Authentication) -> list[bytes]:
        header = _dump(self.header)
        parent_header = _dump(self.parent_header)
        metadata = _dump(self.metadata)
        content = _dump(self.content)
        signature = auth.sign(header, parent_header, metadata, content)
        return [signature, header, parent_header, metadata, content, *self.buffers]

    @staticmethod
    def _read_body(frames: deque[bytes], auth: Authentication) -> dict[str, Any]:
        if len(frames) < 5:
            raise MessageError("Incomplete message")
        signature, header, parent_header, metadata, content = (
            frames.popleft() for _ in range(5)
        )
        fields = {
            "header": _parse(header),
            "parent_header": _parse(parent_header),
            "metadata": _parse(metadata),
            "content": _parse(content),
            "buffers": list(frames),
        }
        frames.clear()
        if not auth.verify(signature, header, parent_header, metadata, content):
            raise MessageError("Signatures don't match")
        return fields


@dataclass
class Message(MessageBase):
    """A message exchanged on the shell, control or stdin channels."""

    identities: list[bytes] = field(default_factory=list)

    def to_frames(self, auth: Authentication) -> list[bytes]:
        """Return the identities, delimiter, signature, JSON parts and buffers."""
        return [*self.identities, self.DELIMITER, *self._body_frames(auth)]

    @classmethod
    def from_frames(cls, frames: Iterable[bytes], auth: Authentication) -> Message:
        """Decode and verify a multipart message.

        Raises MessageError when the delimiter is missing, a frame is not
        valid JSON, or the signature does not match.
        """
        queue = deque(bytes(frame) for frame in frames)
        if not queue:
            raise MessageError("Delimiter not present in message")
        identities: list[bytes] = []
        frame = queue.popleft()
        while not cls.is_delimiter(frame) and queue:
            identities.append(frame)
            frame = queue.popleft()
        if not queue:
            raise MessageError("Delimiter not present in message")
        return cls(identities=identities, **cls._read_body(queue, auth))


@dataclass
class PubMessage(MessageBase):
    """A message broadcast on the iopub channel under a topic."""

    topic: str = ""

    def to_frames(self, auth: Authentication) -> list[bytes]:
        """Return the topic, delimiter, signature, JSON parts and buffers."""
        return [self.topic.encode("utf-8"), self.DELIMITER, *self._body_frames(auth)]

    @classmethod
    def from_frames(cls, frames: Iterable[bytes], auth: Authentication) -> PubMessage:
        """Decode and verify a published multipart message.

        The second frame is taken as the delimiter without being checked.
        """
        queue = deque(bytes(frame) for frame in frames)
        if len(queue) < 2:
            raise MessageError("Incomplete message")
        topic = queue.popleft().decode("utf-8", errors="replace")
        queue.popleft()
        return cls(topic=topic, **cls._read_body(queue, auth))


def iso8601_now() -> str:
    """Return the current UTC time as "YYYY-MM-DDTHH:MM:SS.<micros>Z".

    The microseconds are written without leading zeros.
    """
    now_ns = time.time_ns()
    seconds = now_ns // 1_000_000_000
    micros = (now_ns // 1_000) % 1_000_000
    stamp = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    return f"{stamp}.{micros}Z"


def make_header(msg_type: str, user_name: str, session_id: str) -> dict[str, str]:
    """Build a fresh message header with a new message id and the current date."""
    return {
        "msg_id": str(uuid.uuid4()),
        "username": user_name,
        "session": session_id,
        "date": iso8601_now(),
        "msg_type": msg_type,
        "version": get_protocol_version(),
    }