"""Signing and verification of the four JSON frames of a message."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Authentication(ABC):
    """Base class of message signers.

    Subclasses implement ``_sign`` and ``_verify``; callers use ``sign`` and
    ``verify``, which always hand over the serialized frames in protocol
    order: header, parent header, metadata, content.
    """

    def sign(
        self,
        header: bytes,
        parent_header: bytes,
        metadata: bytes,
        content: bytes,
    ) -> bytes:
        """Return the signature frame for the given serialized frames."""
        return bytes(self._sign(header, parent_header, metadata, content))

    def verify(
        self,
        signature: bytes,
        header: bytes,
        parent_header: bytes,
        metadata: bytes,
        content: bytes,
    ) -> bool:
        """Return True when ``signature`` matches the given serialized frames."""
        return bool(self._verify(signature, header, parent_header, metadata, content))

    @abstractmethod
    def _sign(
        self,
        header: bytes,
        parent_header: bytes,
        metadata: bytes,
        content: bytes,
    ) -> bytes:
        """Compute the signature of the frames."""

    @abstractmethod
    def _verify(
        self,
        signature: bytes,
        header: bytes,
        parent_header: bytes,
        metadata: bytes,
        content: bytes,
    ) -> bool:
        """Check a signature against the frames."""