"""
fpm-supervisor: run a single php-fpm pool in the foreground.

The supervisor package holds the Process descriptor; settings and config
provide the defaults it falls back on.
"""

from .supervisor import Process, ProcessState, ExitStatus, resolve_address

__all__ = ["Process", "ProcessState", "ExitStatus", "resolve_address"]
