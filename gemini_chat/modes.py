"""Mode state for the chat window and the transitions that change it.

The toggles shown in the window (persona selectors, *Synthesis* and *Search*
buttons) are a projection of a single :class:`ModeState` value.  The window
never reads widget state when sending; it passes
:meth:`ModeController.snapshot` to the session instead.
"""

import dataclasses
import logging
from dataclasses import dataclass

from .personas import DEFAULT, Persona, PersonaKind

log = logging.getLogger("gemini_chat")


@dataclass(frozen=True)
class ModeState:
    """Immutable snapshot of the chat toggles.

    ``secondary_persona`` is kept while synthesis is off so that toggling
    synthesis back on restores the previous pairing.
    """

    active_persona: Persona = DEFAULT
    secondary_persona: Persona = DEFAULT
    synthesis_active: bool = False
    search_active: bool = False

    @property
    def image_mode(self) -> bool:
        """True when the request goes to the image endpoint."""
        return (self.active_persona.kind is PersonaKind.IMAGE_GENERATION
                and not self.synthesis_active)


class ModeController:
    """Owns the current :class:`ModeState` for one open chat window."""

    def __init__(self, state: ModeState | None = None) -> None:
        self._state = state or ModeState()

    @property
    def state(self) -> ModeState:
        return self._state

    def snapshot(self) -> ModeState:
        """Return the state to use for one send (values are immutable)."""
        return self._state

    def select_persona(self, persona: Persona) -> ModeState:
        """Set the active persona.

        Choosing *Deep Research* switches search on.  Switching away again
        leaves search on; only :meth:`toggle_search` turns it off.
        """
        changes: dict = {"active_persona": persona}
        if persona.kind is PersonaKind.DEEP_RESEARCH:
            changes["search_active"] = True
        self._state = dataclasses.replace(self._state, **changes)
        log.debug("[APP] Active persona -> %s (search=%s)",
                  persona.name, self._state.search_active)
        return self._state

    def select_secondary_persona(self, persona: Persona) -> ModeState:
        self._state = dataclasses.replace(self._state, secondary_persona=persona)
        log.debug("[APP] Secondary persona -> %s", persona.name)
        return self._state

    def toggle_synthesis(self) -> ModeState:
        self._state = dataclasses.replace(
            self._state, synthesis_active=not self._state.synthesis_active,
        )
        log.debug("[APP] Synthesis %s",
                  "on" if self._state.synthesis_active else "off")
        return self._state

    def toggle_search(self) -> ModeState:
        self._state = dataclasses.replace(
            self._state, search_active=not self._state.search_active,
        )
        log.debug("[APP] Search %s",
                  "on" if self._state.search_active else "off")
        return self._state
