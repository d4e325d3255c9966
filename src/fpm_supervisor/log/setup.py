import logging
import sys
from pathlib import Path
from typing import Optional, Union

from fpm_supervisor.config import effective_settings as config


class SubprocessLogFilter(logging.Filter):
    """
    Identifies records coming from the worker's output streams
    and keeps them out of handlers that only want supervisor logs.
    """
    def filter(self, record):
        # The 'proc.' prefix is used by log_process_output in process_utils.py
        return not record.name.startswith('proc.')


class MainFormatter(logging.Formatter):
    """A formatter that prints worker output raw and supervisor logs decorated."""

    def format(self, record):
        if record.name.startswith('proc.'):
            return record.getMessage()

        original_format = self._style._fmt
        self._style._fmt = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'
        formatted_message = super().format(record)
        self._style._fmt = original_format
        return formatted_message


def setup_logging(console_level: int = logging.INFO, log_file: Optional[Union[str, Path]] = None) -> None:
    """
    Configures the root logger.
    Sets up a console handler and, optionally, a file handler, clearing any
    previously configured handlers to prevent duplication.

    :param console_level: The logging level for the console output (e.g., logging.INFO).
    :param log_file: Optional path of a log file; defaults to the LOG_FILE_PATH setting.
    """
    root_logger = logging.getLogger()
    # Set root level to lowest to capture all messages for handler filtering
    root_logger.setLevel(logging.DEBUG)

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(MainFormatter())
    root_logger.addHandler(console_handler)

    # --- File Handler (conditional) ---
    log_file = log_file or config.LOG_FILE_PATH
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'))
            file_handler.addFilter(SubprocessLogFilter())
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.error(f"Failed to initialize file logging handler for '{log_file}': {e}")
