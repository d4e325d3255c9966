import logging
import configparser
from pathlib import Path
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .process import Process

log = logging.getLogger(__name__)

GLOBAL_SECTION = "global"
POOL_SECTION = "www"

#* --- Fixed pool manager tuning ---
PM_MODE = "dynamic"
PM_MAX_CHILDREN = 5
PM_START_SERVERS = 2
PM_MIN_SPARE_SERVERS = 1
PM_MAX_SPARE_SERVERS = 3


def build_config(process: "Process") -> configparser.ConfigParser:
    """
    Builds a minimal php-fpm config running a single pool.

    The document has a [global] section with the pid file and error log, and one
    pool section with the listen address and fixed 'dynamic' process manager tuning.

    :param process: The descriptor whose paths and listen value are echoed verbatim.
    :return: The in-memory INI document. Use save_config() to write it.
    """
    document = configparser.ConfigParser(interpolation=None)
    document[GLOBAL_SECTION] = {
        "pid": process.pid_file,
        "error_log": process.error_log,
    }
    document[POOL_SECTION] = {
        "listen": process.listen,
        "pm": PM_MODE,
        "pm.max_children": str(PM_MAX_CHILDREN),
        "pm.start_servers": str(PM_START_SERVERS),
        "pm.min_spare_servers": str(PM_MIN_SPARE_SERVERS),
        "pm.max_spare_servers": str(PM_MAX_SPARE_SERVERS),
    }
    return document


def save_config(document: configparser.ConfigParser, path: Union[str, Path]) -> Path:
    """Writes the document to `path` as INI text, creating parent folders."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        document.write(f)
    log.debug(f"php-fpm config written to '{target}'.")
    return target
