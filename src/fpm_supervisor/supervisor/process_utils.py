import sys
import psutil
import logging
import threading
import subprocess
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Union

log = logging.getLogger(__name__)

#* --- Worker command line ---
# Flag tokens understood by php-fpm; they must match the binary exactly.
FLAG_CONFIG = "--fpm-config"
FLAG_FOREGROUND = "-F"
FLAG_NO_INI = "-n"
FLAG_EXTENDED_INFO = "-e"


def get_executable_path(base_path: Union[str, Path]) -> Path:
    """Returns the platform-specific full path for an executable."""
    base_path = Path(base_path)
    if sys.platform == "win32" and not base_path.suffix:
        return base_path.with_suffix(".exe")
    return base_path


def get_process_args(exec_path: Union[str, Path], config_file: Union[str, Path]) -> List[str]:
    """
    Returns the command line that runs php-fpm in the foreground with the given config.

    :param exec_path: Path to the php-fpm binary.
    :param config_file: Path to the rendered php-fpm config.
    :return list: The argument vector, executable first.
    """
    return [
        str(get_executable_path(exec_path)),
        FLAG_CONFIG, str(config_file),
        FLAG_FOREGROUND,     # do not daemonize
        FLAG_NO_INI,         # no php.ini file
        FLAG_EXTENDED_INFO,  # extended information
    ]


def get_popen_kwargs() -> Dict[str, Any]:
    """Returns platform-specific keyword arguments for subprocess.Popen."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NO_WINDOW}
    return {}


#* --- Output streams ---
def _read_pipe(pipe: IO[bytes], process_name: str, level: int) -> None:
    """Target function for reader threads. Reads and logs lines from a subprocess pipe."""
    proc_logger = logging.getLogger(f"proc.{process_name}")
    try:
        for line_bytes in iter(pipe.readline, b""):
            line = line_bytes.decode("utf-8", errors="replace").rstrip()
            if not line:
                continue
            proc_logger.log(level, line)
    except (OSError, ValueError) as e:
        proc_logger.debug(f"Pipe reader for {process_name} stream exited: {e}")
    finally:
        pipe.close()


def log_process_output(
    stdout: Optional[IO[bytes]],
    stderr: Optional[IO[bytes]],
    name: str,
) -> List[threading.Thread]:
    """
    Starts background threads to consume and log a process's stdout/stderr.

    Reading the pipes keeps the worker from blocking on a full buffer.
    Stdout lines are logged at INFO and stderr lines at ERROR on the
    `proc.<name>` logger.

    :return list: The started reader threads.
    """
    threads = []
    if stdout:
        threads.append(threading.Thread(
            target=_read_pipe, args=(stdout, name, logging.INFO),
            daemon=True, name=f"{name}-stdout",
        ))
    if stderr:
        threads.append(threading.Thread(
            target=_read_pipe, args=(stderr, name, logging.ERROR),
            daemon=True, name=f"{name}-stderr",
        ))
    for thread in threads:
        thread.start()
    return threads


#* --- Process Status ---
def pid_exists(pid: int) -> bool:
    """A wrapper for psutil.pid_exists for easy testing/mocking if needed."""
    return psutil.pid_exists(pid)


def is_process_alive(pid: int) -> bool:
    """Returns True if `pid` is running and not a zombie awaiting its parent."""
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False


def get_child_pids(pid: int) -> List[int]:
    """Returns the pids of all descendants of `pid`, or an empty list if it is gone."""
    try:
        return [child.pid for child in psutil.Process(pid).children(recursive=True)]
    except psutil.NoSuchProcess:
        return []


def read_pid_file(path: Union[str, Path]) -> Optional[int]:
    """
    Reads a pid written by the worker and checks that the process exists.

    :return: The pid, or None if the file is missing, malformed or stale.
    """
    pid_path = Path(path)
    if not pid_path.is_file():
        return None
    try:
        pid = int(pid_path.read_text().strip())
    except (ValueError, OSError) as e:
        log.warning(f"Unreadable pid file '{pid_path}': {e}")
        return None
    return pid if pid_exists(pid) else None
