import logging
import unittest

from utils.logger import CenteredNameFormatter, get_logger


def record(name: str) -> logging.LogRecord:
    return logging.makeLogRecord({"name": name, "msg": "hello", "levelno": logging.INFO})


class CenteredNameFormatterTestCase(unittest.TestCase):
    def test_short_names_are_centred_to_initial_width(self):
        formatter = CenteredNameFormatter("[%(name)s] %(message)s", initial_width=8)
        self.assertEqual(formatter.format(record("db")), "[   db   ] hello")

    def test_width_grows_with_longest_name(self):
        formatter = CenteredNameFormatter("[%(name)s] %(message)s", initial_width=4)
        formatter.format(record("views.scr_journal"))
        self.assertEqual(formatter.name_width, len("views.scr_journal"))
        self.assertEqual(len(formatter.format(record("db"))), len("[views.scr_journal] hello"))

    def test_formatters_do_not_share_width(self):
        wide = CenteredNameFormatter("%(name)s", initial_width=4)
        narrow = CenteredNameFormatter("%(name)s", initial_width=4)
        wide.format(record("a.really.long.logger.name"))
        self.assertEqual(narrow.name_width, 4)
        self.assertEqual(narrow.format(record("db")), " db ")

    def test_record_name_is_left_untouched(self):
        formatter = CenteredNameFormatter("%(name)s", initial_width=10)
        original = record("db")
        formatter.format(original)
        self.assertEqual(original.name, "db")


class GetLoggerTestCase(unittest.TestCase):
    def test_handler_attached_once(self):
        first = get_logger("tests.logger.once")
        second = get_logger("tests.logger.once")
        self.assertIs(first, second)
        self.assertEqual(len(second.handlers), 1)
        self.assertFalse(second.propagate)
        self.assertIsInstance(second.handlers[0].formatter, CenteredNameFormatter)
