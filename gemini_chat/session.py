"""
Chat session — one open chat window's worth of sending logic.

A send is split in three steps so the window can run the network call on a
worker thread:

1. :meth:`ChatSession.prepare` (UI thread) checks the key, composes the
   request, shows the user's message and takes the pending attachments;
2. :meth:`ChatSession.dispatch` (any thread) performs the single HTTP call;
3. :meth:`ChatSession.render` (UI thread) shows the result.

:meth:`ChatSession.send_message` runs all three in a row and is what tests
and non-threaded hosts use.

Only one request may be in flight at a time; a second send while the first
is outstanding is rejected with a system message and makes no network call.
"""

import logging
import threading
from typing import Callable

from .attachments import Attachment, AttachmentBuffer, read_attachment
from .composer import GeminiRequest, compose_request, preview_request
from .errors import InvalidRequest, MissingCredential
from .gemini_api import GeminiAPIError, GeminiClient
from .interpreter import ApiError, ImageResult, Result, TextResult
from .modes import ModeState
from .personas import PersonaCatalog
from .surface import ChatSurface, ConfigSource

log = logging.getLogger("gemini_chat")

USER_SENDER = "User"
MODEL_SENDER = "Gemini"
SYSTEM_SENDER = "System"

BUSY_MESSAGE = "Please wait for the current reply before sending again."
IMAGE_MODE_ATTACHMENT_WARNING = (
    "Attachments are not supported in Image Generation mode; "
    "only the prompt text was sent. Ignored: {names}"
)


def error_text(message: str) -> str:
    """Format *message* the way every failure is shown to the user."""
    return f"Error: {message}"


class ChatSession:
    """Sends messages for one chat view and reports results to a surface."""

    def __init__(
        self,
        config: ConfigSource,
        surface: ChatSurface,
        client_factory: Callable[[str], GeminiClient] = GeminiClient,
    ) -> None:
        self._config = config
        self._surface = surface
        self._client_factory = client_factory
        self.attachments = AttachmentBuffer()
        self.catalog = PersonaCatalog(config.get_personas())
        self._in_flight = False
        self._dispatch_key = ""
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Attachments & personas
    # ------------------------------------------------------------------

    def attach_file(self, file_path: str) -> Attachment:
        """Read *file_path* into the pending attachments and return it."""
        att = read_attachment(file_path)
        self.attachments.add(att)
        return att

    def reload_personas(self) -> None:
        """Re-read saved personas after the settings have changed."""
        self.catalog.load(self._config.get_personas())

    @property
    def busy(self) -> bool:
        return self._in_flight

    # ------------------------------------------------------------------
    # Send steps
    # ------------------------------------------------------------------

    def compose(self, text: str, mode: ModeState) -> GeminiRequest:
        """Compose the request for *text* and the pending attachments."""
        return compose_request(
            text,
            self.attachments.items(),
            mode,
            self.catalog.instruction_for,
            model=self._config.get_model(),
        )

    def preview(self, text: str, mode: ModeState) -> dict:
        """Describe what :meth:`send_message` would send, without sending."""
        return preview_request(self.compose(text.strip(), mode))

    def prepare(self, text: str, mode: ModeState) -> GeminiRequest | None:
        """Validate and compose one send; show the user's message.

        Returns ``None`` when another request is still in flight.

        Raises
        ------
        InvalidRequest
            Empty text and no attachments (nothing is shown), or empty text
            in image mode (the error is shown and attachments are kept).
        MissingCredential
            No API key.  The error is shown and attachments are kept.
        """
        text = text.strip()
        with self._lock:
            if self._in_flight:
                log.info("[APP] Send rejected: a request is already in flight.")
                self._surface.append_text(SYSTEM_SENDER, BUSY_MESSAGE)
                return None

            if not text and not self.attachments:
                raise InvalidRequest()

            if not self._config.get_api_key():
                exc = MissingCredential()
                self._surface.append_error(error_text(str(exc)))
                raise exc

            try:
                request = self.compose(text, mode)
            except InvalidRequest as exc:
                # Only image mode gets here: files pending but no prompt.
                self._surface.append_error(error_text(str(exc)))
                raise
            sent = self.attachments.take()
            self._dispatch_key = self._config.get_api_key()
            self._in_flight = True

        display = text
        for att in sent:
            display += f"\n[📎 {att.name}]"
        self._surface.append_text(USER_SENDER, display.strip())

        if request.dropped_attachments:
            names = ", ".join(a.name for a in request.dropped_attachments)
            log.warning("[APP] Image mode: %d attachment(s) not sent.",
                        len(request.dropped_attachments))
            self._surface.append_text(
                SYSTEM_SENDER, IMAGE_MODE_ATTACHMENT_WARNING.format(names=names),
            )
        return request

    def dispatch(self, request: GeminiRequest) -> Result:
        """Perform the HTTP call for a prepared request.

        Uses the API key captured by :meth:`prepare`, so clearing the key in
        the settings while a request is in flight does not affect it.

        Raises
        ------
        GeminiAPIError
            When the transport fails before any HTTP reply.
        """
        try:
            client = self._client_factory(self._dispatch_key)
            return client.send(request)
        finally:
            with self._lock:
                self._in_flight = False

    def render(self, result: Result) -> None:
        """Show *result* on the surface."""
        if isinstance(result, ImageResult):
            self._surface.append_image(result.data_uri)
        elif isinstance(result, TextResult):
            self._surface.append_text(MODEL_SENDER, result.text)
        elif isinstance(result, ApiError):
            self._surface.append_error(error_text(result.message))
        else:
            raise TypeError(f"Unknown result type: {type(result).__name__}")

    # ------------------------------------------------------------------
    # One-shot send
    # ------------------------------------------------------------------

    def send_message(self, text: str, mode: ModeState) -> Result | None:
        """Send *text* with the pending attachments and show the outcome.

        Returns the :data:`~gemini_chat.interpreter.Result`, or ``None`` when
        nothing was sent (empty input, missing key, busy, transport failure).
        """
        try:
            request = self.prepare(text, mode)
        except InvalidRequest:
            log.debug("[APP] Nothing sendable (empty text); not sent.")
            return None
        except MissingCredential:
            return None
        if request is None:
            return None

        try:
            result = self.dispatch(request)
        except GeminiAPIError as exc:
            self._surface.append_error(error_text(str(exc)))
            return None
        self.render(result)
        return result
