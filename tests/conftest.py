"""Shared fixtures: a fake php-fpm binary and free local addresses."""

from __future__ import annotations

import socket
import stat
import sys
import textwrap

import pytest

from fpm_supervisor.supervisor import Process

# Stand-in for php-fpm: understands the same flags, reads the pool's listen
# value from the INI file, binds it and exits cleanly on SIGINT.
FAKE_FPM = textwrap.dedent('''\
    #!{python}
    import configparser
    import os
    import signal
    import socket
    import sys

    args = sys.argv[1:]
    assert {{"-F", "-n", "-e"}} <= set(args)
    conf = configparser.ConfigParser(interpolation=None)
    conf.read(args[args.index("--fpm-config") + 1])
    listen = conf["www"]["listen"]
    pid_file = conf["global"]["pid"]
    is_tcp = (listen.isascii() and listen.isdigit()) or ":" in listen

    def shutdown(signum, frame):
        if not is_tcp and os.path.exists(listen):
            os.unlink(listen)
        if pid_file and os.path.exists(pid_file):
            os.unlink(pid_file)
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)

    if is_tcp:
        host, _, port = listen.rpartition(":")
        server = socket.create_server((host or "127.0.0.1", int(port)))
    else:
        server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        server.bind(listen)
        server.listen()

    if pid_file:
        with open(pid_file, "w") as f:
            f.write(str(os.getpid()))

    print("NOTICE: fpm is running, pid", os.getpid(), flush=True)
    print("NOTICE: ready to handle connections", file=sys.stderr, flush=True)
    while True:
        conn, _ = server.accept()
        conn.close()
''')

# Starts, then never binds anything.
SILENT_FPM = textwrap.dedent('''\
    #!{python}
    import signal
    import sys
    import time

    signal.signal(signal.SIGINT, lambda signum, frame: sys.exit(0))
    while True:
        time.sleep(0.05)
''')


def _write_executable(path, source):
    path.write_text(source.format(python=sys.executable))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def short_tmp():
    """A short temp folder; unix socket paths are limited to ~100 bytes."""
    import tempfile
    import shutil

    path = tempfile.mkdtemp(prefix="fpm")
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def fake_fpm(tmp_path):
    return _write_executable(tmp_path / "php-fpm", FAKE_FPM)


@pytest.fixture
def silent_fpm(tmp_path):
    return _write_executable(tmp_path / "silent-fpm", SILENT_FPM)


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def reap():
    """Collects started processes and makes sure none outlive the test."""
    started: list[Process] = []
    yield started.append
    for process in started:
        if process.pid is not None:
            try:
                process.stop()
            except Exception:
                pass
            process.wait()
