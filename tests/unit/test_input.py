"""
Unit tests for keyboard input.

Tests key name lookup, per-side bindings and the held-key provider.
"""

import unittest
from unittest.mock import Mock

import pygame

from pongsim.config import Config, Settings
from pongsim.core.exceptions import InputMappingError
from pongsim.input import (
    Key, KeyBinding, KeyboardInputProvider, DEFAULT_BINDINGS,
    bindings_from_settings, direction_for
)
from pongsim.physics import PaddleSide


def key_event(event_type, key):
    return pygame.event.Event(event_type, key=key)


class TestKey(unittest.TestCase):
    """Test the key enumeration."""

    def test_from_name_is_case_insensitive(self):
        self.assertEqual(Key.from_name("W"), Key.W)
        self.assertEqual(Key.from_name("Up"), Key.UP)

    def test_unknown_name(self):
        with self.assertRaises(InputMappingError) as ctx:
            Key.from_name("hyper")
        self.assertEqual(ctx.exception.context["key_name"], "hyper")

    def test_pygame_codes(self):
        self.assertEqual(Key.W.pygame_code, pygame.K_w)
        self.assertEqual(Key.UP.pygame_code, pygame.K_UP)
        self.assertEqual(Key.LSHIFT.pygame_code, pygame.K_LSHIFT)

    def test_from_pygame(self):
        self.assertEqual(Key.from_pygame(pygame.K_s), Key.S)
        self.assertEqual(Key.from_pygame(pygame.K_DOWN), Key.DOWN)
        self.assertIsNone(Key.from_pygame(pygame.K_F12))

    def test_every_key_has_a_pygame_code(self):
        for key in Key:
            self.assertIsInstance(key.pygame_code, int, key)


class TestKeyBinding(unittest.TestCase):
    """Test per-paddle key bindings."""

    def test_names_are_normalized(self):
        binding = KeyBinding("W", "S")
        self.assertEqual((binding.up_key, binding.down_key), ("w", "s"))

    def test_same_key_rejected(self):
        with self.assertRaises(InputMappingError):
            KeyBinding("up", "UP")

    def test_unknown_key_rejected(self):
        with self.assertRaises(InputMappingError):
            KeyBinding("w", "nope")

    def test_direction(self):
        binding = KeyBinding("w", "s")

        self.assertEqual(binding.direction(set()), 0)
        self.assertEqual(binding.direction({"w"}), -1)
        self.assertEqual(binding.direction({"s"}), 1)
        self.assertEqual(binding.direction(["s", "up"]), 1)

    def test_both_keys_cancel_out(self):
        self.assertEqual(KeyBinding("w", "s").direction({"w", "s"}), 0)


class TestDirectionFor(unittest.TestCase):
    """Test the default key map."""

    def test_left_paddle_keys(self):
        self.assertEqual(direction_for(PaddleSide.LEFT, {"w"}), -1)
        self.assertEqual(direction_for(PaddleSide.LEFT, {"s"}), 1)
        self.assertEqual(direction_for(PaddleSide.LEFT, {"up"}), 0)

    def test_right_paddle_keys(self):
        self.assertEqual(direction_for(PaddleSide.RIGHT, {"up"}), -1)
        self.assertEqual(direction_for(PaddleSide.RIGHT, {"down"}), 1)
        self.assertEqual(direction_for(PaddleSide.RIGHT, set()), 0)
        self.assertEqual(direction_for(PaddleSide.RIGHT, {"w"}), 0)

    def test_custom_bindings(self):
        bindings = {PaddleSide.LEFT: KeyBinding("q", "a"),
                    PaddleSide.RIGHT: KeyBinding("o", "l")}
        self.assertEqual(direction_for(PaddleSide.LEFT, {"a"}, bindings), 1)
        self.assertEqual(direction_for(PaddleSide.RIGHT, {"o"}, bindings), -1)

    def test_bindings_from_settings(self):
        config = Config()
        config.reset_to_defaults()
        config.set("input.left.up", "Q")
        config.set("input.left.down", "A")

        bindings = bindings_from_settings(Settings(config))

        self.assertEqual(bindings[PaddleSide.LEFT], KeyBinding("q", "a"))
        self.assertEqual(bindings[PaddleSide.RIGHT], DEFAULT_BINDINGS[PaddleSide.RIGHT])

    def test_conflicting_settings_report_side(self):
        config = Config()
        config.reset_to_defaults()
        config.set("input.right.down", "up")

        with self.assertRaises(InputMappingError) as ctx:
            bindings_from_settings(Settings(config))
        self.assertEqual(ctx.exception.context["side"], "right")


class TestKeyboardInputProvider(unittest.TestCase):
    """Test held-key tracking."""

    def setUp(self):
        self.provider = KeyboardInputProvider()

    def test_press_and_release(self):
        self.provider.press("W")
        self.assertEqual(self.provider.held_keys, frozenset({"w"}))
        self.assertEqual(self.provider.direction_for(PaddleSide.LEFT), -1)

        self.provider.release("w")
        self.assertEqual(self.provider.held_keys, frozenset())
        self.assertEqual(self.provider.direction_for(PaddleSide.LEFT), 0)

    def test_handle_key_events(self):
        self.assertTrue(self.provider.handle_event(key_event(pygame.KEYDOWN, pygame.K_DOWN)))
        self.assertEqual(self.provider.direction_for(PaddleSide.RIGHT), 1)

        self.assertTrue(self.provider.handle_event(key_event(pygame.KEYUP, pygame.K_DOWN)))
        self.assertEqual(self.provider.direction_for(PaddleSide.RIGHT), 0)
        self.assertEqual(self.provider.events_processed, 2)

    def test_unmapped_and_non_key_events_ignored(self):
        self.assertFalse(self.provider.handle_event(key_event(pygame.KEYDOWN, pygame.K_F12)))
        self.assertFalse(self.provider.handle_event(pygame.event.Event(pygame.MOUSEMOTION)))
        self.assertEqual(self.provider.held_keys, frozenset())
        self.assertEqual(self.provider.events_processed, 0)

    def test_held_keys_is_a_snapshot(self):
        held = self.provider.held_keys
        self.provider.press("s")
        self.assertEqual(held, frozenset())

    def test_callbacks_fire_on_changes_only(self):
        callback = Mock()
        self.provider.add_key_callback(callback)

        self.provider.press("w")
        self.provider.press("w")
        self.provider.release("w")
        self.provider.release("w")

        self.assertEqual(callback.call_count, 2)
        callback.assert_any_call("w", True)
        callback.assert_any_call("w", False)

    def test_failing_callback_does_not_break_input(self):
        self.provider.add_key_callback(Mock(side_effect=RuntimeError("boom")))
        self.provider.press("up")
        self.assertIn("up", self.provider.held_keys)

    def test_clear(self):
        self.provider.press("w")
        self.provider.press("down")
        self.provider.clear()
        self.assertEqual(self.provider.held_keys, frozenset())


if __name__ == '__main__':
    unittest.main(verbosity=2)
