import time
import queue
import socket
import logging
import threading
from typing import Optional

from fpm_supervisor.config import effective_settings as config
from .address import split_tcp_address
from .errors import ReadinessTimeoutError

log = logging.getLogger(__name__)


class ReadinessProbe:
    """
    Waits for a listener to accept connections on a tcp or unix address.

    A background thread dials the address every `interval` seconds while the
    caller waits on a single-slot queue for at most `timeout` seconds. Whichever
    finishes first decides the outcome; the caller then sets a shared flag so the
    polling thread stops at its next attempt instead of dialing forever.
    """

    def __init__(
        self,
        network: str,
        address: str,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        connect_timeout: Optional[float] = None,
    ) -> None:
        self.network = network
        self.address = address
        self.timeout = config.READINESS_TIMEOUT if timeout is None else timeout
        self.interval = config.POLL_INTERVAL if interval is None else interval
        self.connect_timeout = config.CONNECT_TIMEOUT if connect_timeout is None else connect_timeout

    def dial(self) -> socket.socket:
        """
        Opens a single client connection to the address.

        :raises OSError: If the connection cannot be established.
        """
        if self.network == "unix":
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.settimeout(self.connect_timeout)
                sock.connect(self.address)
            except OSError:
                sock.close()
                raise
            return sock

        host, port = split_tcp_address(self.address)
        try:
            port_number = int(port)
        except ValueError:
            raise OSError(f"invalid port '{port}' in address '{self.address}'") from None
        return socket.create_connection((host, port_number), timeout=self.connect_timeout)

    def _poll(self, result: queue.Queue, resolved: threading.Event, handoff: threading.Lock) -> None:
        """Target for the polling thread. Hands off the first successful connection."""
        attempts = 0
        while not resolved.is_set():
            attempts += 1
            try:
                conn = self.dial()
            except OSError:
                # Event.wait doubles as the sleep and wakes early once resolved.
                resolved.wait(self.interval)
                continue

            with handoff:
                if resolved.is_set():
                    conn.close()
                    break
                result.put_nowait(conn)
            log.debug(f"Readiness probe connected to {self.network} '{self.address}' after {attempts} attempt(s).")
            return
        log.debug(f"Readiness probe for {self.network} '{self.address}' abandoned after {attempts} attempt(s).")

    def wait(self) -> float:
        """
        Blocks until the address accepts a connection or the timeout elapses.

        :return float: Seconds it took for the listener to become ready.
        :raises ReadinessTimeoutError: If no connection succeeded in time.
        """
        result: queue.Queue = queue.Queue(maxsize=1)
        resolved = threading.Event()
        handoff = threading.Lock()
        start_time = time.monotonic()

        threading.Thread(
            target=self._poll,
            args=(result, resolved, handoff),
            daemon=True,
            name="ReadinessProbe",
        ).start()

        try:
            conn = result.get(timeout=self.timeout)
        except queue.Empty:
            # The poller may have handed off between the timeout and this point.
            with handoff:
                resolved.set()
                try:
                    conn = result.get_nowait()
                except queue.Empty:
                    raise ReadinessTimeoutError(self.network, self.address, self.timeout) from None

        resolved.set()
        conn.close()
        elapsed = time.monotonic() - start_time
        log.debug(f"Listener at {self.network} '{self.address}' ready in {elapsed:.3f}s.")
        return elapsed
