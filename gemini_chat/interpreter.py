"""
Response interpreter — classifies a raw HTTP reply from Gemini.

The two endpoints answer with different shapes::

    generateContent  {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
    predict          {"predictions": [{"bytesBase64Encoded": "..."}]}

Any status >= 400 becomes an :class:`ApiError` no matter what the body says.
A 2xx body that does not have the expected shape is *not* an error: it
degrades to a fixed fallback message and a warning is logged.
"""

import json
import logging
from dataclasses import dataclass
from typing import Union

from .composer import RequestKind

log = logging.getLogger("gemini_chat")

NO_TEXT_FALLBACK = "No response from Gemini."
NO_IMAGE_FALLBACK = "No image generated."


@dataclass(frozen=True)
class TextResult:
    text: str


@dataclass(frozen=True)
class ImageResult:
    data_uri: str

    @property
    def base64_data(self) -> str:
        """The base64 payload without the ``data:...;base64,`` header."""
        return self.data_uri.partition(",")[2]


@dataclass(frozen=True)
class ApiError:
    status_code: int
    body: str

    @property
    def message(self) -> str:
        return f"API Error: {self.status_code}\n{_extract_error_detail(self.body)}"


Result = Union[TextResult, ImageResult, ApiError]


def _extract_error_detail(body: str) -> str:
    """Pull the human-readable message out of a Google API error body.

    Google errors look like ``{"error": {"code": 400, "message": "...",
    "status": "INVALID_ARGUMENT"}}``; anything else is returned as raw text
    truncated to 500 chars.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return body[:500] if body else "(empty body)"
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        err = data["error"]
        return f"[{err.get('status', 'error')}] {err.get('message', '')}".strip()
    return body[:500]


def _parse_json(body: str | bytes | dict | None) -> dict | None:
    if isinstance(body, dict):
        return body
    if not body:
        return None
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        log.warning("[API] Response body is not JSON: %s", str(body)[:200])
        return None
    return data if isinstance(data, dict) else None


def _first(items) -> dict | None:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def _extract_text(data: dict) -> str | None:
    candidate = _first(data.get("candidates"))
    if candidate is None:
        return None
    content = candidate.get("content")
    if not isinstance(content, dict):
        return None
    part = _first(content.get("parts"))
    if part is None:
        return None
    text = part.get("text")
    return text if isinstance(text, str) and text else None


def _extract_image(data: dict) -> str | None:
    prediction = _first(data.get("predictions"))
    if prediction is None:
        return None
    encoded = prediction.get("bytesBase64Encoded")
    return encoded if isinstance(encoded, str) and encoded else None


def interpret_response(
    status_code: int,
    body: str | bytes | dict | None,
    kind: RequestKind = RequestKind.GENERATE,
) -> Result:
    """Return the :data:`Result` for one HTTP reply.

    Parameters
    ----------
    status_code : HTTP status of the reply.
    body        : Raw body text (or an already-decoded JSON object).
    kind        : Which endpoint produced the reply.
    """
    if status_code >= 400:
        if isinstance(body, bytes):
            text = body.decode("utf-8", errors="replace")
        elif isinstance(body, dict):
            text = json.dumps(body)
        else:
            text = body or ""
        return ApiError(status_code, text)

    data = _parse_json(body) or {}

    if kind is RequestKind.IMAGE:
        encoded = _extract_image(data)
        if encoded is None:
            log.warning("[API] Image response had no predictions: %s",
                        json.dumps(data)[:300])
            return TextResult(NO_IMAGE_FALLBACK)
        return ImageResult(f"data:image/png;base64,{encoded}")

    text = _extract_text(data)
    if text is None:
        log.warning("[API] Generation response had no candidate text: %s",
                    json.dumps(data)[:300])
        return TextResult(NO_TEXT_FALLBACK)
    return TextResult(text)
