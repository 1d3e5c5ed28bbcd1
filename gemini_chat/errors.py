"""Exception hierarchy shared by the composer, the session and the UI.

HTTP failures reported by the server are *not* exceptions here: the
interpreter turns them into :class:`~gemini_chat.interpreter.ApiError`
results so they can be rendered like any other reply.
"""


class GeminiChatError(Exception):
    """Base class for every error raised by this package."""


class MissingCredential(GeminiChatError):
    """No API key is configured."""

    def __init__(self, message: str = "API Key not set.") -> None:
        super().__init__(message)


class InvalidRequest(GeminiChatError):
    """The message has neither text nor attachments."""

    def __init__(
        self, message: str = "Cannot send an empty message without attachments.",
    ) -> None:
        super().__init__(message)


class AttachmentError(GeminiChatError):
    """A file could not be read into an attachment."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot attach {path}: {reason}")
