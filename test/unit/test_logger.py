"""
Test logger levels, context formatting and raise-on-error
"""

import unittest

from apidump.errors import DecodeError, GrammarMismatch, SourceLocation
from apidump.logger import logger, LogLevel, set_log_level, get_log_level


class TestLogger(unittest.TestCase):

    def setUp(self):
        self._saved = get_log_level()

    def tearDown(self):
        set_log_level(self._saved)

    def test_set_level(self):
        set_log_level(LogLevel.DEBUG)
        self.assertEqual(get_log_level(), LogLevel.DEBUG)
        self.assertTrue(logger.is_enabled(LogLevel.DEBUG))
        set_log_level(LogLevel.ERROR)
        self.assertFalse(logger.is_enabled(LogLevel.WARNING))

    def test_debug_context(self):
        with self.assertLogs('apidump', level='DEBUG') as logs:
            logger.debug("Defines found", count=3)
        self.assertEqual(logs.output, ["DEBUG:apidump:Defines found [count=3]"])

    def test_error_without_exception(self):
        with self.assertLogs('apidump', level='ERROR') as logs:
            logger.error("Something odd", code="E1")
        self.assertIn("Something odd [code='E1']", logs.output[0])

    def test_error_raises_decode_error_with_location(self):
        loc = SourceLocation(10, 2, 5)
        with self.assertLogs('apidump', level='ERROR') as logs:
            with self.assertRaises(GrammarMismatch) as ctx:
                logger.error("Expected header", location=loc, exc_type=GrammarMismatch)
        self.assertIs(ctx.exception.location, loc)
        self.assertEqual(str(ctx.exception), "Expected header at line 2, column 5")
        self.assertIn("at line 2, column 5", logs.output[0])

    def test_error_passes_location_to_any_decode_error(self):
        class ExtraDecodeError(DecodeError):
            pass

        loc = SourceLocation(3, 1, 4)
        with self.assertLogs('apidump', level='ERROR'):
            with self.assertRaises(ExtraDecodeError) as ctx:
                logger.error("Extra failure", location=loc, exc_type=ExtraDecodeError)
        self.assertIs(ctx.exception.location, loc)
        self.assertEqual(ctx.exception.message, "Extra failure")

    def test_error_raises_builtin_exception(self):
        with self.assertLogs('apidump', level='ERROR'):
            with self.assertRaises(ValueError) as ctx:
                logger.error("Bad value", location=SourceLocation(0, 1, 1), exc_type=ValueError)
        self.assertEqual(str(ctx.exception), "Bad value at line 1, column 1")


if __name__ == '__main__':
    unittest.main()
