"""
Google Gemini REST client.

Sends one composed :class:`~gemini_chat.composer.GeminiRequest` with
``requests`` and hands the raw reply to the interpreter.  There is no
streaming, no retry and no timeout: a request runs until the server answers
or the transport fails.

The API key travels as the ``key`` query parameter, so URLs are always
logged with the key replaced by ``<API_KEY>``.
"""

import json
import logging

import requests

from .composer import GeminiRequest, summarise_payload
from .errors import GeminiChatError, MissingCredential
from .interpreter import ApiError, Result, interpret_response

log = logging.getLogger("gemini_chat")

_HEADERS = {
    "Content-Type": "application/json",
}


# ---------------------------------------------------------------------------
# Error-handling helpers
# ---------------------------------------------------------------------------

class GeminiAPIError(GeminiChatError):
    """Transport-level failure (no HTTP reply) with diagnostic context.

    Attributes
    ----------
    endpoint : str
        The URL that was called, with the key redacted.
    model : str
        Model identifier the request was built for.
    payload_summary : dict | None
        Summarised payload (attachment data replaced by sizes).
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
        model: str = "",
        payload_summary: dict | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.model = model
        self.payload_summary = payload_summary
        super().__init__(message)

    def __str__(self) -> str:  # noqa: D105
        parts = [super().__str__()]
        if self.endpoint:
            parts.append(f"  Endpoint: {self.endpoint}")
        if self.model:
            parts.append(f"  Model: {self.model}")
        if self.payload_summary:
            parts.append(f"  Payload keys: {list(self.payload_summary.keys())}")
        return "\n".join(parts)


class GeminiClient:
    """Thin wrapper around the ``generateContent`` and ``predict`` endpoints."""

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise MissingCredential()
        self._api_key = api_key

    def send(self, request: GeminiRequest) -> Result:
        """POST *request* and return the interpreted result.

        HTTP errors come back as :class:`~gemini_chat.interpreter.ApiError`.

        Raises
        ------
        GeminiAPIError
            When no HTTP reply was received (DNS, connection, TLS, …).
        """
        redacted = request.url("<API_KEY>")
        summary = summarise_payload(request.payload)

        log.debug("[API] ── Sending %s request ──", request.kind.name)
        log.debug("[API]   POST %s", redacted)
        log.debug("[API]   payload = %s", json.dumps(summary, ensure_ascii=False))

        try:
            response = requests.post(
                request.url(self._api_key),
                headers=_HEADERS,
                json=request.payload,
            )
        except requests.RequestException as exc:
            log.error("[API] Request to %s failed: %s: %s",
                      redacted, type(exc).__name__, exc)
            raise GeminiAPIError(
                f"Network error: could not reach the Gemini API "
                f"({type(exc).__name__}: {exc}).",
                endpoint=redacted,
                model=request.model,
                payload_summary=summary,
            ) from exc

        log.debug("[API] POST %s → %d  (body len=%d)",
                  redacted, response.status_code, len(response.text or ""))

        result = interpret_response(
            response.status_code, response.text, request.kind,
        )
        if isinstance(result, ApiError):
            log.error("[API] Gemini API returned HTTP %d: %s",
                      result.status_code, result.body[:500])
        return result
