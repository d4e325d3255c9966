"""Tests for the pipe readers and pid helpers."""

from __future__ import annotations

import io
import logging
import os

from fpm_supervisor.supervisor import process_utils


def test_read_pid_file_returns_live_pid(tmp_path):
    pid_file = tmp_path / "phpfpm.pid"
    pid_file.write_text(f"{os.getpid()}\n")
    assert process_utils.read_pid_file(pid_file) == os.getpid()


def test_read_pid_file_missing_or_garbage(tmp_path, caplog):
    assert process_utils.read_pid_file(tmp_path / "absent.pid") is None

    garbage = tmp_path / "garbage.pid"
    garbage.write_text("not a pid")
    assert process_utils.read_pid_file(garbage) is None
    assert "Unreadable pid file" in caplog.text


def test_read_pid_file_stale_pid(tmp_path, monkeypatch):
    pid_file = tmp_path / "phpfpm.pid"
    pid_file.write_text("424242")
    monkeypatch.setattr(process_utils, "pid_exists", lambda pid: False)
    assert process_utils.read_pid_file(pid_file) is None


def test_current_process_is_alive():
    assert process_utils.is_process_alive(os.getpid())
    assert isinstance(process_utils.get_child_pids(os.getpid()), list)


def test_log_process_output_routes_streams(caplog):
    stdout = io.BytesIO(b"NOTICE: fpm is running\n\nsecond line\n")
    stderr = io.BytesIO(b"WARNING: [pool www] seems busy\n")

    with caplog.at_level(logging.INFO, logger="proc.fpm-test"):
        threads = process_utils.log_process_output(stdout, stderr, "fpm-test")
        for thread in threads:
            thread.join(timeout=2)

    records = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == "proc.fpm-test"]
    assert (logging.INFO, "NOTICE: fpm is running") in records
    assert (logging.INFO, "second line") in records
    assert (logging.ERROR, "WARNING: [pool www] seems busy") in records
    assert len(records) == 3
    assert stdout.closed and stderr.closed



def test_executable_path_is_unchanged_on_posix():
    if os.name != "nt":
        assert str(process_utils.get_executable_path("/usr/sbin/php-fpm")) == "/usr/sbin/php-fpm"
