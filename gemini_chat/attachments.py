"""
File attachments and the pending-attachment buffer.

Every attachment is sent to Gemini as an ``inline_data`` part, so a file is
simply read as raw bytes and base64-encoded.  The MIME type comes from the
file extension; Gemini rejects types it cannot handle and that error is
shown to the user like any other API error.

The :class:`AttachmentBuffer` collects files between sends.  When a message
is dispatched the caller uses :meth:`AttachmentBuffer.take`, which hands back
a private tuple and leaves the live buffer empty, so edits made while a
request is in flight never touch that request's payload.
"""

import base64
import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Iterator

from .errors import AttachmentError

log = logging.getLogger("gemini_chat")

DEFAULT_MIME = "application/octet-stream"

# Extensions that ``mimetypes`` does not know on every platform.
_EXTRA_MIME: dict[str, str] = {
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".md":   "text/markdown",
}


@dataclass(frozen=True)
class Attachment:
    """A file waiting to be sent."""

    name: str
    mime_type: str
    data: str        # base64, no ``data:`` prefix

    @property
    def size(self) -> int:
        """Approximate decoded size in bytes."""
        return len(self.data) * 3 // 4


def guess_mime_type(file_path: str) -> str:
    """Return the MIME type for *file_path* based on its extension."""
    ext = os.path.splitext(file_path)[1].lower()
    if ext in _EXTRA_MIME:
        return _EXTRA_MIME[ext]
    mime, _ = mimetypes.guess_type(file_path)
    return mime or DEFAULT_MIME


def read_attachment(file_path: str) -> Attachment:
    """Read *file_path* into an :class:`Attachment`.

    Raises
    ------
    AttachmentError
        When the file cannot be opened or read.
    """
    try:
        with open(file_path, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        raise AttachmentError(file_path, exc.strerror or str(exc)) from exc
    att = Attachment(
        name=os.path.basename(file_path),
        mime_type=guess_mime_type(file_path),
        data=base64.b64encode(raw).decode("ascii"),
    )
    log.debug("[APP] Read attachment %s (%s, %d bytes)",
              att.name, att.mime_type, len(raw))
    return att


class AttachmentBuffer:
    """Ordered list of pending attachments."""

    def __init__(self) -> None:
        self._items: list[Attachment] = []

    def add(self, attachment: Attachment) -> None:
        self._items.append(attachment)

    def remove(self, index: int) -> Attachment | None:
        """Remove and return the attachment at *index* (no-op if out of range)."""
        if 0 <= index < len(self._items):
            return self._items.pop(index)
        return None

    def clear(self) -> None:
        self._items = []

    def take(self) -> tuple[Attachment, ...]:
        """Return the pending attachments and swap in an empty buffer."""
        taken = tuple(self._items)
        self._items = []
        return taken

    def items(self) -> tuple[Attachment, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[Attachment]:
        return iter(tuple(self._items))
