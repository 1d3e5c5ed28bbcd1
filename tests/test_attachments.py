"""Tests for gemini_chat/attachments.py."""

import base64
import os
import tempfile
import unittest

from gemini_chat.attachments import (
    DEFAULT_MIME,
    Attachment,
    AttachmentBuffer,
    guess_mime_type,
    read_attachment,
)
from gemini_chat.errors import AttachmentError


class TestReadAttachment(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def _write(self, name: str, data: bytes) -> str:
        path = os.path.join(self._tmp.name, name)
        with open(path, "wb") as fh:
            fh.write(data)
        return path

    def test_reads_base64_and_mime(self) -> None:
        path = self._write("photo.png", b"\x89PNG data")
        att = read_attachment(path)
        self.assertEqual(att.name, "photo.png")
        self.assertEqual(att.mime_type, "image/png")
        self.assertEqual(base64.b64decode(att.data), b"\x89PNG data")

    def test_unknown_extension_uses_default_mime(self) -> None:
        path = self._write("blob.zzzunknown", b"x")
        self.assertEqual(read_attachment(path).mime_type, DEFAULT_MIME)

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(AttachmentError) as ctx:
            read_attachment(os.path.join(self._tmp.name, "missing.txt"))
        self.assertIn("missing.txt", str(ctx.exception))

    def test_guess_mime_type(self) -> None:
        self.assertEqual(guess_mime_type("a.PDF"), "application/pdf")
        self.assertEqual(guess_mime_type("a.webp"), "image/webp")
        self.assertEqual(guess_mime_type("notes.md"), "text/markdown")


class TestAttachmentBuffer(unittest.TestCase):

    A = Attachment("a.txt", "text/plain", "YQ==")
    B = Attachment("b.txt", "text/plain", "Yg==")

    def test_add_and_order(self) -> None:
        buf = AttachmentBuffer()
        buf.add(self.A)
        buf.add(self.B)
        self.assertEqual(buf.items(), (self.A, self.B))
        self.assertEqual(len(buf), 2)
        self.assertTrue(buf)

    def test_remove(self) -> None:
        buf = AttachmentBuffer()
        buf.add(self.A)
        buf.add(self.B)
        self.assertIs(buf.remove(0), self.A)
        self.assertEqual(buf.items(), (self.B,))
        self.assertIsNone(buf.remove(5))

    def test_take_empties_buffer_and_copy_is_private(self) -> None:
        buf = AttachmentBuffer()
        buf.add(self.A)
        taken = buf.take()
        self.assertEqual(taken, (self.A,))
        self.assertFalse(buf)
        buf.add(self.B)
        self.assertEqual(taken, (self.A,))

    def test_clear(self) -> None:
        buf = AttachmentBuffer()
        buf.add(self.A)
        buf.clear()
        self.assertEqual(len(buf), 0)


if __name__ == "__main__":
    unittest.main()
