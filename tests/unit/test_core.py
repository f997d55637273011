"""
Unit tests for the core logging and error handling.
"""

import json
import logging
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from pongsim.core.logging import (
    StructuredFormatter, configure_logging, get_logger, shutdown_logging
)
from pongsim.core.exceptions import (
    ErrorSeverity, PongSimError, InvalidConfigValueError, InputMappingError,
    InvalidStepInputError, SimulationError, ErrorHandler,
    get_error_handler, reset_error_handler
)


def make_record(msg="hello", **extra):
    record = logging.LogRecord("pongsim.test", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter(unittest.TestCase):
    """Test log record formatting."""

    def test_json_format_includes_extra(self):
        formatter = StructuredFormatter("json")

        data = json.loads(formatter.format(make_record(frame=3, event="ball_reset")))

        self.assertEqual(data["message"], "hello")
        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "pongsim.test")
        self.assertEqual(data["extra"]["frame"], 3)
        self.assertEqual(data["extra"]["event"], "ball_reset")

    def test_unserializable_extra_is_stringified(self):
        formatter = StructuredFormatter("json")
        data = json.loads(formatter.format(make_record(obj=object)))
        self.assertIsInstance(data["extra"]["obj"], str)

    def test_human_format(self):
        formatter = StructuredFormatter("human")

        line = formatter.format(make_record(frame=3))

        self.assertIn("INFO", line)
        self.assertIn("hello", line)
        self.assertIn("frame=3", line)

    def test_extra_can_be_disabled(self):
        formatter = StructuredFormatter("json", include_extra=False)
        data = json.loads(formatter.format(make_record(frame=3)))
        self.assertNotIn("extra", data)


class TestLoggerManager(unittest.TestCase):
    """Test logging configuration."""

    def tearDown(self):
        shutdown_logging()

    def test_loggers_are_namespaced(self):
        self.assertEqual(get_logger("physics").name, "pongsim.physics")

    def test_file_output(self):
        with tempfile.TemporaryDirectory() as tmp:
            configure_logging("DEBUG", log_dir=Path(tmp), console_output=False,
                              file_output=True, json_format=True)

            get_logger("test").info("written", extra={"frame": 1})
            shutdown_logging()

            lines = (Path(tmp) / "pongsim.log").read_text(encoding="utf-8").splitlines()

        entries = [json.loads(line) for line in lines]
        entry = next(e for e in entries if e["message"] == "written")
        self.assertEqual(entry["message"], "written")
        self.assertEqual(entry["extra"]["frame"], 1)

    def test_level_applied(self):
        configure_logging("WARNING", console_output=False, file_output=False)
        self.assertEqual(logging.getLogger("pongsim").level, logging.WARNING)

    def test_configure_is_idempotent(self):
        configure_logging("INFO", console_output=True, file_output=False)
        configure_logging("INFO", console_output=True, file_output=False)
        self.assertEqual(len(logging.getLogger("pongsim").handlers), 1)


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_base_error(self):
        cause = ValueError("bad")
        error = PongSimError("Failed", context={"frame": 2}, cause=cause)

        self.assertEqual(error.error_code, "PongSimError")
        self.assertEqual(error.severity, ErrorSeverity.MEDIUM)
        self.assertEqual(str(error), "PongSimError: Failed | Context: frame=2 | Caused by: bad")
        self.assertEqual(error.to_dict()["cause"], "bad")

    def test_invalid_config_value(self):
        error = InvalidConfigValueError("ball.radius", 0, "a positive number")

        self.assertIn("ball.radius", error.message)
        self.assertEqual(error.context["config_key"], "ball.radius")

    def test_input_mapping_error(self):
        error = InputMappingError("Unknown key", key_name="hyper")
        self.assertEqual(error.context, {"key_name": "hyper"})

    def test_invalid_step_input_is_high_severity(self):
        error = InvalidStepInputError("Bad direction", context={"direction": 2})

        self.assertIsInstance(error, SimulationError)
        self.assertEqual(error.severity, ErrorSeverity.HIGH)


class TestErrorHandler(unittest.TestCase):
    """Test error dispatch."""

    def setUp(self):
        reset_error_handler()
        self.original_hook = sys.excepthook

    def tearDown(self):
        sys.excepthook = self.original_hook
        reset_error_handler()

    def test_callbacks_receive_context(self):
        handler = ErrorHandler()
        callback = Mock()
        handler.register_error_callback(callback)

        handler.handle_error(InvalidStepInputError("Bad delta"), {"frame": 9})

        error, context = callback.call_args[0]
        self.assertIsInstance(error, InvalidStepInputError)
        self.assertEqual(context["frame"], 9)
        self.assertEqual(context["severity"], "high")

    def test_unexpected_errors_carry_traceback(self):
        handler = ErrorHandler()
        callback = Mock()
        handler.register_error_callback(callback)

        handler.handle_error(RuntimeError("boom"))

        self.assertIn("traceback", callback.call_args[0][1])

    def test_failing_callback_is_contained(self):
        handler = ErrorHandler()
        handler.register_error_callback(Mock(side_effect=RuntimeError("callback")))
        handler.handle_error(PongSimError("original"))

    def test_crash_handlers(self):
        handler = ErrorHandler()
        crash = Mock()
        handler.register_crash_handler(crash)

        error = RuntimeError("fatal")
        handler.handle_crash(error)

        crash.assert_called_once_with(error)

    def test_global_hook_installed(self):
        handler = get_error_handler()
        handler.setup_global_exception_handler()
        self.assertIsNot(sys.excepthook, self.original_hook)

        with patch.object(handler, "handle_crash") as crash, \
                patch.object(sys, "__excepthook__"):
            error = RuntimeError("unhandled")
            sys.excepthook(RuntimeError, error, None)

        crash.assert_called_once_with(error)

    def test_global_handler_is_shared(self):
        self.assertIs(get_error_handler(), get_error_handler())


if __name__ == '__main__':
    unittest.main(verbosity=2)
