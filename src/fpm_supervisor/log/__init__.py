"""
Logging module for fpm-supervisor.
This module provides the root logger setup shared by the CLI and library callers.
"""

from .setup import setup_logging, MainFormatter, SubprocessLogFilter

__all__ = ["setup_logging", "MainFormatter", "SubprocessLogFilter"]
