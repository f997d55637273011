"""
Unit tests for the rendering system.

Tests colors, the pygame renderer with pygame mocked out, and the snapshot
renderer's draw calls.
"""

import unittest
from unittest.mock import Mock, patch, MagicMock

import pygame

from pongsim.config import Config, Settings
from pongsim.physics import Board, Ball, Paddle, Snapshot, Vector2D
from pongsim.rendering import (
    RenderEngine, Renderer2D, RenderEngineType, Color, StandardColors,
    SnapshotRenderer, get_render_engine, create_render_engine, reset_render_engine
)


def make_settings(**overrides) -> Settings:
    config = Config()
    config.reset_to_defaults()
    for key, value in overrides.items():
        config.set(key, value)
    return Settings(config)


def make_snapshot() -> Snapshot:
    return Snapshot(
        ball=Ball(250, 150, 0.3, 0.2, 8),
        paddle_left=Paddle(20, 110, 0, 0.3, 5, 80),
        paddle_right=Paddle(475, 110, 0, 0.3, 5, 80),
    )


class TestColor(unittest.TestCase):
    """Test the Color class."""

    def test_color_clamping(self):
        """Test that color values are clamped to valid ranges."""
        color = Color(300, -50, 128)
        self.assertEqual(color.to_tuple_rgba(), (255, 0, 128, 255))

    def test_from_hex(self):
        self.assertEqual(Color.from_hex("#ff8000").to_tuple(), (255, 128, 0))
        self.assertEqual(Color.from_hex("102030").to_tuple(), (16, 32, 48))
        self.assertEqual(Color.from_hex("#00000080").a, 128)

    def test_from_hex_rejects_bad_values(self):
        for value in ("#fff", "#12345", "#gggggg", ""):
            with self.assertRaises(ValueError, msg=value):
                Color.from_hex(value)


class TestRenderer2D(unittest.TestCase):
    """Test the pygame renderer with pygame mocked."""

    def setUp(self):
        patcher = patch('pongsim.rendering.engine.pygame')
        self.mock_pygame = patcher.start()
        self.addCleanup(patcher.stop)
        self.mock_pygame.error = pygame.error

        self.screen = MagicMock()
        self.mock_pygame.display.set_mode.return_value = self.screen

        self.renderer = Renderer2D()

    def test_initialization(self):
        """Test renderer initialization."""
        self.assertFalse(self.renderer.is_initialized())

        result = self.renderer.initialize(500, 300, "Pong")

        self.assertTrue(result)
        self.assertTrue(self.renderer.is_initialized())
        self.mock_pygame.display.set_mode.assert_called_once_with((500, 300))
        self.mock_pygame.display.set_caption.assert_called_once_with("Pong")
        self.assertEqual(self.renderer.get_screen_size(), (500, 300))

    def test_initialization_failure(self):
        self.mock_pygame.display.set_mode.side_effect = pygame.error("no video device")

        self.assertFalse(self.renderer.initialize())
        self.assertFalse(self.renderer.is_initialized())

    def test_drawing_before_initialize_is_ignored(self):
        self.renderer.draw_circle(Vector2D(1, 1), 4, StandardColors.WHITE)
        self.renderer.end_frame()
        self.mock_pygame.draw.circle.assert_not_called()
        self.mock_pygame.display.flip.assert_not_called()

    def test_draw_calls(self):
        self.renderer.initialize()
        self.renderer.begin_frame()

        self.renderer.clear()
        self.renderer.draw_circle(Vector2D(250.4, 149.6), 8, StandardColors.WHITE)
        self.renderer.draw_rectangle(Vector2D(20, 110), 5, 80, StandardColors.WHITE)
        self.renderer.end_frame()

        self.screen.fill.assert_called_once_with((0, 0, 0))
        self.mock_pygame.draw.circle.assert_called_once_with(
            self.screen, (255, 255, 255), (250, 150), 8
        )
        rect = self.mock_pygame.draw.rect.call_args[0][2]
        self.assertEqual((rect.x, rect.y, rect.width, rect.height), (20, 110, 5, 80))
        self.mock_pygame.display.flip.assert_called_once()
        self.assertEqual(self.renderer.get_stats().frame_count, 1)
        self.assertEqual(self.renderer.get_stats().draw_calls, 2)

    def test_shutdown(self):
        self.renderer.initialize()
        self.renderer.shutdown()

        self.assertFalse(self.renderer.is_initialized())
        self.mock_pygame.quit.assert_called_once()

    def test_shutdown_without_initialize(self):
        self.renderer.shutdown()
        self.mock_pygame.quit.assert_not_called()


class TestRenderEngineFactory(unittest.TestCase):
    """Test the global engine factory."""

    def tearDown(self):
        reset_render_engine()

    def test_create_2d_engine(self):
        engine = create_render_engine(RenderEngineType.RENDERER_2D)

        self.assertIsInstance(engine, Renderer2D)
        self.assertIs(get_render_engine(), engine)

    def test_reset(self):
        create_render_engine(RenderEngineType.RENDERER_2D)
        reset_render_engine()
        self.assertIsNone(get_render_engine())

    def test_unsupported_type(self):
        with self.assertRaises(ValueError):
            create_render_engine("vector")


class TestSnapshotRenderer(unittest.TestCase):
    """Test drawing a snapshot."""

    def setUp(self):
        self.engine = Mock(spec=RenderEngine)
        self.board = Board(500, 300)

    def test_draws_board_paddles_and_ball(self):
        renderer = SnapshotRenderer(self.engine, self.board, make_settings())

        renderer.render(make_snapshot())

        self.engine.begin_frame.assert_called_once()
        self.engine.clear.assert_called_once()
        self.engine.draw_line.assert_called_once_with(
            Vector2D(250, 0), Vector2D(250, 300), StandardColors.DARK_GRAY
        )
        self.assertEqual(self.engine.draw_rectangle.call_count, 2)
        self.engine.draw_rectangle.assert_any_call(Vector2D(20, 110), 5, 80, StandardColors.WHITE)
        self.engine.draw_rectangle.assert_any_call(Vector2D(475, 110), 5, 80, StandardColors.WHITE)
        self.engine.draw_circle.assert_called_once_with(Vector2D(250, 150), 8, StandardColors.WHITE)
        self.engine.draw_text.assert_not_called()
        self.engine.end_frame.assert_called_once()

    def test_status_text(self):
        renderer = SnapshotRenderer(self.engine, self.board, make_settings())

        renderer.render(make_snapshot(), "PAUSED")

        self.assertEqual(self.engine.draw_text.call_args[0][0], "PAUSED")

    def test_configured_colors(self):
        settings = make_settings(**{"rendering.background": "#102030",
                                    "rendering.foreground": "#ff0000",
                                    "rendering.centerline": False})

        renderer = SnapshotRenderer(self.engine, self.board, settings)
        renderer.render(make_snapshot())

        self.engine.set_background_color.assert_called_once_with(Color(16, 32, 48))
        self.engine.draw_line.assert_not_called()
        self.engine.draw_circle.assert_called_once_with(Vector2D(250, 150), 8, Color(255, 0, 0))

    def test_invalid_color_falls_back(self):
        settings = make_settings(**{"rendering.foreground": "not-a-color"})

        renderer = SnapshotRenderer(self.engine, self.board, settings)

        self.assertEqual(renderer.foreground, StandardColors.WHITE)


if __name__ == '__main__':
    unittest.main(verbosity=2)
