import signal
import logging
import posixpath
import subprocess
import configparser
from enum import Enum
from pathlib import Path
from typing import IO, List, NamedTuple, Optional, Tuple, Union

from fpm_supervisor.config import effective_settings as config
from . import fpm_config, process_utils
from .address import resolve_address
from .readiness import ReadinessProbe
from .errors import (
    ConfigurationError,
    ProcessNotStartedError,
    ProcessStateError,
    ReadinessTimeoutError,
    SignalError,
    SpawnError,
    WaitError,
)

log = logging.getLogger(__name__)

PID_FILE_NAME = "phpfpm.pid"
ERROR_LOG_NAME = "phpfpm.error_log"
SOCKET_NAME = "phpfpm.sock"

# Signals the worker treats as a graceful stop.
GRACEFUL_SIGNALS = {signal.SIGINT, signal.SIGTERM}


class ProcessState(str, Enum):
    UNSTARTED = "unstarted"
    RUNNING = "running"
    STOPPED = "stopped"


class ExitStatus(NamedTuple):
    """Exit information of a reaped worker. A negative returncode means it died by signal."""

    pid: int
    returncode: int

    @property
    def signal(self) -> Optional[int]:
        return -self.returncode if self.returncode < 0 else None

    @property
    def clean(self) -> bool:
        """True for a zero exit or termination by a graceful stop signal."""
        return self.returncode == 0 or self.signal in GRACEFUL_SIGNALS


class Process:
    """
    Describes a minimal php-fpm setup that runs exactly one pool.

    Populate the paths directly or with set_datadir(), write the config with
    save_config(), then start(), stop() and wait(). The descriptor exclusively
    owns the spawned process and is meant to be used once. Lifecycle calls are
    not synchronized; callers must not invoke them concurrently.
    """

    def __init__(
        self,
        exec_path: Optional[Union[str, Path]] = None,
        readiness_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.exec_path: str = str(exec_path or config.PHPFPM_PATH)
        self.config_file: str = ""
        # The address on which to accept FastCGI requests. Valid syntaxes are
        # 'ip.add.re.ss:port', 'port' and '/path/to/unix/socket'.
        self.listen: str = ""
        self.pid_file: str = ""
        self.error_log: str = ""

        self.readiness_timeout = config.READINESS_TIMEOUT if readiness_timeout is None else readiness_timeout
        self.poll_interval = config.POLL_INTERVAL if poll_interval is None else poll_interval

        self.state = ProcessState.UNSTARTED
        self._popen: Optional[subprocess.Popen] = None

    def __repr__(self) -> str:
        return f"<Process exec={self.exec_path!r} listen={self.listen!r} state={self.state.value} pid={self.pid}>"

    #* --- Configuration ---
    def set_datadir(self, prefix: Union[str, Path]) -> None:
        """
        Sets the pid file, error log and listen socket inside one folder.

        Equals to:
            pid_file  = prefix + "/phpfpm.pid"
            error_log = prefix + "/phpfpm.error_log"
            listen    = prefix + "/phpfpm.sock"
        """
        prefix = str(prefix)
        self.pid_file = posixpath.normpath(posixpath.join(prefix, PID_FILE_NAME))
        self.error_log = posixpath.normpath(posixpath.join(prefix, ERROR_LOG_NAME))
        self.listen = posixpath.normpath(posixpath.join(prefix, SOCKET_NAME))

    def address(self) -> Tuple[str, str]:
        """Returns the (network, address) pair clients use to reach the pool."""
        return resolve_address(self.listen)

    def config(self) -> configparser.ConfigParser:
        """Returns the php-fpm config for this descriptor as an INI document."""
        return fpm_config.build_config(self)

    def save_config(self, path: Union[str, Path]) -> None:
        """Records `path` as the config file and writes the config there."""
        self.config_file = str(path)
        fpm_config.save_config(self.config(), self.config_file)

    #* --- Lifecycle ---
    @property
    def pid(self) -> Optional[int]:
        return self._popen.pid if self._popen else None

    def start(self) -> Tuple[IO[bytes], IO[bytes]]:
        """
        Starts php-fpm in foreground mode and waits until it accepts connections.

        The config file must have been written beforehand. The returned pipes are
        not read by the supervisor; consume them (or call log_output()) so the
        worker never blocks on a full buffer.

        :return tuple: The worker's (stdout, stderr) byte streams.
        :raises ConfigurationError: If no listen address is set.
        :raises SpawnError: If the process or its pipes could not be created.
        :raises ReadinessTimeoutError: If the listener did not come up in time.
            The worker is left running; stop() and wait() still apply.
        """
        if self._popen is not None:
            raise ProcessStateError(f"php-fpm is already started with PID {self._popen.pid}.")
        if not self.listen:
            raise ConfigurationError("A listen address is required before starting php-fpm.")

        args = process_utils.get_process_args(self.exec_path, self.config_file)
        log.info(f"Starting php-fpm: {' '.join(args)}")
        try:
            self._popen = subprocess.Popen(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                **process_utils.get_popen_kwargs(),
            )
        except OSError as e:
            log.critical(f"Failed to start php-fpm '{self.exec_path}': {e}", exc_info=True)
            raise SpawnError(f"failed to start '{self.exec_path}': {e}") from e

        network, address = self.address()
        probe = ReadinessProbe(network, address, timeout=self.readiness_timeout, interval=self.poll_interval)
        try:
            elapsed = probe.wait()
        except ReadinessTimeoutError as e:
            log.error(f"php-fpm (PID {self._popen.pid}) was spawned but is not ready: {e}")
            raise

        self.state = ProcessState.RUNNING
        log.info(f"php-fpm started with PID {self._popen.pid}, listening on {network} '{address}' after {elapsed:.2f}s.")
        return self._popen.stdout, self._popen.stderr

    def stop(self) -> None:
        """Sends SIGINT so php-fpm shuts down gracefully. Does not wait for the exit."""
        if self._popen is None:
            raise ProcessNotStartedError("Cannot stop php-fpm: no process has been started.")
        try:
            self._popen.send_signal(signal.SIGINT)
        except OSError as e:
            log.error(f"Failed to send SIGINT to php-fpm (PID {self._popen.pid}): {e}", exc_info=True)
            raise SignalError(f"failed to signal PID {self._popen.pid}: {e}") from e
        log.info(f"Sent SIGINT to php-fpm (PID {self._popen.pid}).")

    def wait(self) -> ExitStatus:
        """
        Blocks until php-fpm exits and reaps it.

        The process handle is consumed; a later stop() or wait() raises
        ProcessNotStartedError.

        :return ExitStatus: The pid and return code of the worker.
        """
        if self._popen is None:
            raise ProcessNotStartedError("Cannot wait for php-fpm: no process has been started.")
        popen = self._popen
        try:
            returncode = popen.wait()
        except OSError as e:
            log.error(f"Failed to wait for php-fpm (PID {popen.pid}): {e}", exc_info=True)
            raise WaitError(f"failed to wait for PID {popen.pid}: {e}") from e

        self._popen = None
        self.state = ProcessState.STOPPED
        status = ExitStatus(popen.pid, returncode)
        if status.clean:
            log.info(f"php-fpm (PID {popen.pid}) exited with code {returncode}.")
        else:
            log.warning(f"php-fpm (PID {popen.pid}) exited abnormally with code {returncode}.")
        return status

    #* --- Monitoring ---
    def log_output(self, name: Optional[str] = None) -> None:
        """Consumes the worker's output pipes in background threads and logs each line."""
        if self._popen is None:
            raise ProcessNotStartedError("Cannot read php-fpm output: no process has been started.")
        process_utils.log_process_output(self._popen.stdout, self._popen.stderr, name or config.PROCESS_NAME)

    def is_running(self) -> bool:
        return self._popen is not None and process_utils.is_process_alive(self._popen.pid)

    def worker_pids(self) -> List[int]:
        """Returns the pids of the pool's child processes."""
        if self._popen is None:
            return []
        return process_utils.get_child_pids(self._popen.pid)

    def master_pid(self) -> Optional[int]:
        """Returns the master pid php-fpm wrote to its pid file, if that process exists."""
        if not self.pid_file:
            return None
        return process_utils.read_pid_file(self.pid_file)
