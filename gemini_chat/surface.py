"""Interfaces between the chat core and whatever hosts it.

The core only needs two capability sets: somewhere to show results
(:class:`ChatSurface`) and somewhere to read settings from
(:class:`ConfigSource`).  The tkinter window implements the first and
:class:`~gemini_chat.settings.Settings` the second; tests use small fakes.
"""

from typing import Protocol


class ChatSurface(Protocol):
    def append_text(self, sender: str, text: str) -> None:
        """Show a text message from *sender* ("User", "Gemini", "System")."""

    def append_image(self, data_uri: str) -> None:
        """Show a ``data:image/png;base64,...`` image from the model."""

    def append_error(self, message: str) -> None:
        """Show a system-style error message."""


class ConfigSource(Protocol):
    def get_api_key(self) -> str: ...

    def get_model(self) -> str: ...

    def get_personas(self) -> list[dict]: ...
