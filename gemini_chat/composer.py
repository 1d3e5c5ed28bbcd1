"""
Request composer — turns one user message plus the current toggles into a
single Gemini API call.

Two endpoints are used:

* ``models/{model}:generateContent`` for ordinary chat (text, attachments,
  system instruction, optional Google Search tool);
* ``models/imagen-3.0-generate-001:predict`` when the *Image Generation*
  persona is active and synthesis is off.  Only the prompt text is sent;
  attachments, tools and personas do not apply to that endpoint.

Everything here is pure: no network, no UI, no settings access.  Persona
instructions arrive through the *lookup* callable so the composer never
needs to know where saved personas are stored.
"""

import enum
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .attachments import Attachment
from .errors import InvalidRequest
from .modes import ModeState
from .personas import Persona, PersonaKind

API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-1.5-flash"
IMAGE_MODEL = "imagen-3.0-generate-001"

#: Stand-in for a persona with no instruction inside the synthesis template.
DEFAULT_ASSISTANT_PLACEHOLDER = "Default Assistant"

SYNTHESIS_TEMPLATE = (
    "You are acting as a synthesis of two personas. Blend their expertise, "
    "tone and priorities into a single coherent answer.\n\n"
    "Persona 1:\n{first}\n\n"
    "Persona 2:\n{second}"
)

SEARCH_TOOL: dict = {"google_search": {}}

PersonaLookup = Callable[[Persona], str]


class RequestKind(enum.Enum):
    GENERATE = "generateContent"
    IMAGE = "predict"


@dataclass(frozen=True)
class GeminiRequest:
    """One outbound API call, ready to be POSTed."""

    kind: RequestKind
    model: str
    payload: dict
    #: Attachments that were pending but cannot be sent in image mode.
    dropped_attachments: tuple[Attachment, ...] = field(default=())

    def url(self, api_key: str) -> str:
        """Return the endpoint URL with *api_key* as the ``key`` parameter."""
        return f"{API_BASE_URL}/{self.model}:{self.kind.value}?key={api_key}"

    @property
    def search_enabled(self) -> bool:
        return SEARCH_TOOL in self.payload.get("tools", [])

    @property
    def system_instruction(self) -> str:
        parts = self.payload.get("system_instruction", {}).get("parts", [])
        return parts[0]["text"] if parts else ""


# ---------------------------------------------------------------------------
# Instruction & tool helpers
# ---------------------------------------------------------------------------

def synthesize_instructions(first: str, second: str) -> str:
    """Merge two persona instructions into the two-persona template."""
    return SYNTHESIS_TEMPLATE.format(
        first=first.strip() or DEFAULT_ASSISTANT_PLACEHOLDER,
        second=second.strip() or DEFAULT_ASSISTANT_PLACEHOLDER,
    )


def resolve_system_instruction(mode: ModeState, lookup: PersonaLookup) -> str:
    """Return the system instruction for *mode* ("" when there is none)."""
    active = lookup(mode.active_persona)
    if not mode.synthesis_active:
        return active.strip()
    return synthesize_instructions(active, lookup(mode.secondary_persona))


def search_enabled(mode: ModeState) -> bool:
    """Whether the Google Search tool is attached for *mode*."""
    if mode.search_active:
        return True
    if mode.active_persona.kind is PersonaKind.DEEP_RESEARCH:
        return True
    return (mode.synthesis_active
            and mode.secondary_persona.kind is PersonaKind.DEEP_RESEARCH)


def build_parts(text: str, attachments: Sequence[Attachment]) -> list[dict]:
    """Return the ``contents[0].parts`` list: text first, then files in order."""
    parts: list[dict] = []
    if text:
        parts.append({"text": text})
    for att in attachments:
        parts.append({
            "inline_data": {"mime_type": att.mime_type, "data": att.data},
        })
    return parts


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------

def _build_payload_generate(
    parts: list[dict], system_text: str, use_search: bool,
) -> dict:
    payload: dict = {"contents": [{"parts": parts}]}
    if system_text:
        payload["system_instruction"] = {"parts": [{"text": system_text}]}
    if use_search:
        payload["tools"] = [dict(SEARCH_TOOL)]
    return payload


def _build_payload_image(prompt: str) -> dict:
    return {"instances": [{"prompt": prompt}]}


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------

def compose_request(
    text: str,
    attachments: Sequence[Attachment],
    mode: ModeState,
    lookup: PersonaLookup,
    model: str = DEFAULT_MODEL,
) -> GeminiRequest:
    """
    Build the request for one message.

    Parameters
    ----------
    text        : The user's message; may be empty when files are attached.
    attachments : Files to send, in the order they were attached.
    mode        : Snapshot of the chat toggles.
    lookup      : Returns the instruction text for a persona.
    model       : Gemini model used for ordinary chat requests.

    Raises
    ------
    InvalidRequest
        When *text* is empty and there are no attachments, or when *text*
        is empty in image mode.
    """
    if not text and not attachments:
        raise InvalidRequest()

    if mode.image_mode:
        # Imagen only reads the prompt, so files alone cannot make a request.
        if not text:
            raise InvalidRequest("Image Generation needs a text prompt.")
        return GeminiRequest(
            kind=RequestKind.IMAGE,
            model=IMAGE_MODEL,
            payload=_build_payload_image(text),
            dropped_attachments=tuple(attachments),
        )

    payload = _build_payload_generate(
        build_parts(text, attachments),
        resolve_system_instruction(mode, lookup),
        search_enabled(mode),
    )
    return GeminiRequest(kind=RequestKind.GENERATE, model=model, payload=payload)


def summarise_payload(payload: dict) -> dict:
    """Return a copy of *payload* that is safe and short enough to log or show.

    Inline attachment data is replaced by its length; long instruction text is
    truncated.
    """
    summary: dict = {}
    for key, value in payload.items():
        if key == "contents":
            summary[key] = [
                {"parts": [_summarise_part(p) for p in c.get("parts", [])]}
                for c in value
            ]
        elif key == "system_instruction":
            text = value.get("parts", [{}])[0].get("text", "")
            summary[key] = text if len(text) <= 80 else text[:80] + "…"
        else:
            summary[key] = value
    return summary


def _summarise_part(part: dict) -> dict:
    if "inline_data" in part:
        inline = part["inline_data"]
        return {"inline_data": {
            "mime_type": inline.get("mime_type", ""),
            "data": f"<{len(inline.get('data', ''))} base64 chars>",
        }}
    return part


def preview_request(request: GeminiRequest) -> dict:
    """Describe *request* without sending it and without the API key."""
    return {
        "endpoint": request.url("<API_KEY>"),
        "kind": request.kind.name,
        "model": request.model,
        "search": request.search_enabled,
        "dropped_attachments": [a.name for a in request.dropped_attachments],
        "payload": summarise_payload(request.payload),
    }
