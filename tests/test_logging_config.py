"""
Tests for logging setup.
"""

import logging
import logging.handlers

from rich.logging import RichHandler

from studio_storage.logging_config import setup_logging


def test_setup_logging_installs_console_and_file_handlers(settings):
    root_logger = logging.getLogger()
    previous_handlers = list(root_logger.handlers)
    previous_level = root_logger.level

    try:
        setup_logging(settings)

        handler_types = [type(handler) for handler in root_logger.handlers]
        assert RichHandler in handler_types
        assert logging.handlers.TimedRotatingFileHandler in handler_types
        assert settings.log_directory.is_dir()
    finally:
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers[:] = previous_handlers
        root_logger.setLevel(previous_level)
