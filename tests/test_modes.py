"""Tests for gemini_chat/modes.py."""

import unittest

from gemini_chat.modes import ModeController, ModeState
from gemini_chat.personas import (
    DEEP_RESEARCH,
    DEFAULT,
    GUIDED_LEARNING,
    IMAGE_GENERATION,
)


class TestModeController(unittest.TestCase):

    def test_initial_state(self) -> None:
        state = ModeController().state
        self.assertEqual(state, ModeState())
        self.assertIs(state.active_persona, DEFAULT)
        self.assertFalse(state.synthesis_active)
        self.assertFalse(state.search_active)

    def test_deep_research_forces_search_on(self) -> None:
        for prior in (False, True):
            ctl = ModeController(ModeState(search_active=prior))
            ctl.select_persona(DEEP_RESEARCH)
            self.assertTrue(ctl.state.search_active)

    def test_switching_away_keeps_search_on(self) -> None:
        ctl = ModeController()
        ctl.select_persona(DEEP_RESEARCH)
        ctl.select_persona(GUIDED_LEARNING)
        self.assertTrue(ctl.state.search_active)
        self.assertIs(ctl.state.active_persona, GUIDED_LEARNING)

    def test_other_personas_leave_search_alone(self) -> None:
        ctl = ModeController()
        ctl.select_persona(GUIDED_LEARNING)
        self.assertFalse(ctl.state.search_active)

    def test_toggle_search(self) -> None:
        ctl = ModeController()
        ctl.toggle_search()
        self.assertTrue(ctl.state.search_active)
        ctl.toggle_search()
        self.assertFalse(ctl.state.search_active)

    def test_toggle_synthesis_preserves_secondary(self) -> None:
        ctl = ModeController()
        ctl.toggle_synthesis()
        ctl.select_secondary_persona(GUIDED_LEARNING)
        ctl.toggle_synthesis()
        self.assertFalse(ctl.state.synthesis_active)
        ctl.toggle_synthesis()
        self.assertTrue(ctl.state.synthesis_active)
        self.assertIs(ctl.state.secondary_persona, GUIDED_LEARNING)

    def test_toggle_synthesis_changes_nothing_else(self) -> None:
        ctl = ModeController(ModeState(DEEP_RESEARCH, GUIDED_LEARNING,
                                       False, True))
        before = ctl.state
        after = ctl.toggle_synthesis()
        self.assertEqual(after.active_persona, before.active_persona)
        self.assertEqual(after.secondary_persona, before.secondary_persona)
        self.assertEqual(after.search_active, before.search_active)

    def test_snapshot_unaffected_by_later_changes(self) -> None:
        ctl = ModeController()
        snap = ctl.snapshot()
        ctl.toggle_search()
        self.assertFalse(snap.search_active)

    def test_image_mode(self) -> None:
        ctl = ModeController()
        ctl.select_persona(IMAGE_GENERATION)
        self.assertTrue(ctl.state.image_mode)
        ctl.toggle_synthesis()
        self.assertFalse(ctl.state.image_mode)


if __name__ == "__main__":
    unittest.main()
