"""
Persona ("Gem") catalog.

A persona is a named system-instruction preset.  Four personas are built in
and never persisted; any number of user-defined personas come from the
settings file as ``{"name": ..., "instruction": ...}`` objects.

Persona names are resolved **once**, when the user picks an entry in a
selector, into a :class:`Persona` value tagged with a :class:`PersonaKind`.
The request composer only ever inspects the kind, never the name.

Name resolution order
---------------------
1. Built-in names always win.  A saved persona that reuses a built-in name
   is skipped (with a warning) so the selector never shows two entries with
   the same label.
2. Among saved personas, the first entry with a given name wins; later
   duplicates are skipped with a warning.
3. Saved personas with an empty name are skipped.
4. Unknown names resolve to *Default*.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable

log = logging.getLogger("gemini_chat")


class PersonaKind(enum.Enum):
    DEFAULT = "default"
    GUIDED_LEARNING = "guided_learning"
    DEEP_RESEARCH = "deep_research"
    IMAGE_GENERATION = "image_generation"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Persona:
    """A resolved persona: its kind, display name and instruction text."""

    kind: PersonaKind
    name: str
    instruction: str = ""

    @property
    def is_builtin(self) -> bool:
        return self.kind is not PersonaKind.CUSTOM


# ---------------------------------------------------------------------------
# Built-in personas
# ---------------------------------------------------------------------------

GUIDED_LEARNING_INSTRUCTION = (
    "You are a patient tutor. Guide the user towards understanding instead "
    "of handing over the final answer. Break problems into small steps, ask "
    "a short question to check understanding before moving on, and adapt "
    "your explanations to the user's level."
)

DEEP_RESEARCH_INSTRUCTION = (
    "You are a meticulous research assistant. Search the web for current, "
    "authoritative sources, compare what they say, and write a structured "
    "report with clear sections. Cite the sources you relied on and point "
    "out where they disagree or where evidence is thin."
)

DEFAULT = Persona(PersonaKind.DEFAULT, "Default", "")
GUIDED_LEARNING = Persona(
    PersonaKind.GUIDED_LEARNING, "Guided Learning", GUIDED_LEARNING_INSTRUCTION,
)
DEEP_RESEARCH = Persona(
    PersonaKind.DEEP_RESEARCH, "Deep Research", DEEP_RESEARCH_INSTRUCTION,
)
IMAGE_GENERATION = Persona(PersonaKind.IMAGE_GENERATION, "Image Generation", "")

#: Built-ins in selector order.
BUILTIN_PERSONAS: tuple[Persona, ...] = (
    DEFAULT,
    GUIDED_LEARNING,
    DEEP_RESEARCH,
    IMAGE_GENERATION,
)

_BUILTIN_BY_NAME: dict[str, Persona] = {p.name: p for p in BUILTIN_PERSONAS}


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class PersonaCatalog:
    """Built-in personas plus the user's saved ones, keyed by name."""

    def __init__(self, saved: Iterable[dict] = ()) -> None:
        self._custom: dict[str, Persona] = {}
        self.load(saved)

    def load(self, saved: Iterable[dict]) -> None:
        """Replace the saved personas with *saved* (list of name/instruction dicts)."""
        custom: dict[str, Persona] = {}
        for entry in saved:
            if not isinstance(entry, dict):
                log.warning("[GEM] Ignoring saved gem that is not an object: %r",
                            entry)
                continue
            name = str(entry.get("name", "")).strip()
            if not name:
                log.warning("[GEM] Ignoring saved gem with an empty name.")
                continue
            if name in _BUILTIN_BY_NAME:
                log.warning("[GEM] Saved gem %r shadows a built-in persona; "
                            "the built-in is used.", name)
                continue
            if name in custom:
                log.warning("[GEM] Duplicate saved gem %r; keeping the first.",
                            name)
                continue
            custom[name] = Persona(
                PersonaKind.CUSTOM, name, str(entry.get("instruction", "")),
            )
        self._custom = custom
        log.debug("[GEM] Catalog loaded with %d saved gem(s).", len(custom))

    def names(self) -> list[str]:
        """Return selector labels: built-ins first, then saved personas."""
        return [p.name for p in BUILTIN_PERSONAS] + list(self._custom)

    def resolve(self, name: str) -> Persona:
        """Return the persona called *name*, or *Default* if there is none."""
        if name in _BUILTIN_BY_NAME:
            return _BUILTIN_BY_NAME[name]
        persona = self._custom.get(name)
        if persona is None:
            log.debug("[GEM] Unknown persona %r; using Default.", name)
            return DEFAULT
        return persona

    def instruction_for(self, persona: Persona) -> str:
        """Return the current instruction text for *persona*.

        Saved personas are looked up again by name so that edits made in the
        settings dialog take effect without re-selecting the persona.
        """
        if persona.is_builtin:
            return persona.instruction
        current = self._custom.get(persona.name)
        return current.instruction if current is not None else persona.instruction

    def __contains__(self, name: object) -> bool:
        return name in _BUILTIN_BY_NAME or name in self._custom

    def __len__(self) -> int:
        return len(BUILTIN_PERSONAS) + len(self._custom)
