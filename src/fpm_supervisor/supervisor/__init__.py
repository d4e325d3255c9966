"""
The Supervisor package.
Manages the lifecycle of a single php-fpm worker.

This package contains the Process descriptor and its helper modules, which
together render the php-fpm config, launch the worker in the foreground, wait
for its listener to come up and stop it gracefully.
"""
from .process import Process, ProcessState, ExitStatus
from .address import resolve_address
from .readiness import ReadinessProbe
from .errors import (
    FpmError,
    ConfigurationError,
    SpawnError,
    ReadinessTimeoutError,
    ProcessStateError,
    ProcessNotStartedError,
    SignalError,
    WaitError,
)

__all__ = [
    'Process', 'ProcessState', 'ExitStatus', 'resolve_address', 'ReadinessProbe',
    'FpmError', 'ConfigurationError', 'SpawnError', 'ReadinessTimeoutError',
    'ProcessStateError', 'ProcessNotStartedError', 'SignalError', 'WaitError',
]
