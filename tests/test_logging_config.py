import logging

from ui.logging_config import setup_logging


def test_setup_logging_sets_level():
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        setup_logging("not-a-level")
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)
