"""Exceptions raised by the php-fpm process supervisor."""


class FpmError(Exception):
    """Base class for all supervisor failures."""


class ConfigurationError(FpmError):
    """The descriptor is missing a field needed to launch the worker."""


class SpawnError(FpmError):
    """The OS failed to create the worker process or its output pipes."""


class ReadinessTimeoutError(FpmError):
    """The worker did not accept a connection before the readiness ceiling."""

    def __init__(self, network: str, address: str, timeout: float) -> None:
        self.network = network
        self.address = address
        self.timeout = timeout
        super().__init__(f"time out: no {network} listener at '{address}' after {timeout:.3f}s")


class ProcessStateError(FpmError):
    """A lifecycle call was made in a state that does not allow it."""


class ProcessNotStartedError(ProcessStateError):
    """stop() or wait() was called without a live process handle."""


class SignalError(FpmError):
    """Delivering the stop signal to the worker failed."""


class WaitError(FpmError):
    """Reaping the worker process failed."""
