import sys
import logging
from pathlib import Path
from typing import List, Optional

import setproctitle

from fpm_supervisor.config import effective_settings as config
from fpm_supervisor.log import setup_logging
from fpm_supervisor.supervisor import Process, FpmError, resolve_address

log = logging.getLogger(__name__)

USAGE = """\
Usage: python -m fpm_supervisor <command> [args] [--verbose]

Commands:
  run [datadir]            Render the config, start php-fpm and supervise it until Ctrl-C.
  config [datadir] [path]  Render the php-fpm config file only.
  address <listen>         Show how a listen value is dialed.
  help                     Show this message.
"""


def _build_process(args: List[str]) -> Process:
    """Creates a descriptor rooted at the given (or configured) data folder."""
    datadir = Path(args[0]) if args else Path(config.DATA_DIR)
    process = Process(config.PHPFPM_PATH)
    process.set_datadir(datadir.resolve())
    return process


def _default_config_path(process: Process) -> Path:
    return Path(process.pid_file).parent / "etc" / config.CONFIG_FILE_NAME


def handle_config_command(args: List[str]) -> int:
    """Writes the php-fpm config for a data folder and reports where it went."""
    process = _build_process(args[:1])
    target = Path(args[1]) if len(args) > 1 else _default_config_path(process)
    process.save_config(target)
    log.info(f"php-fpm config written to '{process.config_file}' (listen: {process.listen}).")
    return 0


def handle_address_command(args: List[str]) -> int:
    if not args:
        log.error("The 'address' command needs a listen value.")
        return 2
    network, address = resolve_address(args[0])
    print(f"{network} {address}")
    return 0


def handle_run_command(args: List[str]) -> int:
    """
    Starts php-fpm and keeps it in the foreground until interrupted.

    :return int: 0 on a clean shutdown, 1 otherwise.
    """
    setproctitle.setproctitle(config.PROCESS_TITLE)
    process = _build_process(args)
    Path(process.pid_file).parent.mkdir(parents=True, exist_ok=True)
    process.save_config(_default_config_path(process))

    try:
        process.start()
    except FpmError as e:
        log.critical(f"php-fpm failed to start: {e}")
        if process.pid is not None:
            process.stop()
            process.wait()
        return 1

    process.log_output()
    log.info(f"php-fpm is ready on {process.listen}. Press Ctrl-C to stop.")
    try:
        status = process.wait()
    except KeyboardInterrupt:
        log.info("Stopping php-fpm...")
        process.stop()
        status = process.wait()
    return 0 if status.clean else 1


def print_help(args: Optional[List[str]] = None) -> int:
    print(USAGE)
    return 0


def execute_command(command: str, args: List[str]) -> int:
    """
    Executes a single command.

    :param command: The command name (e.g., 'run', 'config').
    :param args: Positional arguments for the command.
    :return int: The process exit code.
    """
    log.debug(f"Executing command: {command}, args: {args}")
    command_map = {
        "run": handle_run_command,
        "config": handle_config_command,
        "address": handle_address_command,
        "help": print_help,
    }
    if command not in command_map:
        log.info(f"Unknown command: '{command}'. Type 'help' for a list of commands.")
        return 2
    return command_map[command](args)


def main(argv: Optional[List[str]] = None) -> int:
    """The entry point for the command line."""
    args = list(sys.argv[1:] if argv is None else argv)
    verbose = config.VERBOSE_LOGGING
    if "--verbose" in args:
        verbose = True
        args.remove("--verbose")

    setup_logging(logging.DEBUG if verbose else logging.INFO)

    if not args:
        return print_help()

    command, args = args[0].lower(), args[1:]
    try:
        return execute_command(command, args)
    except (OSError, FpmError) as e:
        log.error(f"Command '{command}' failed: {e}", exc_info=verbose)
        return 1
