from typing import Tuple

DEFAULT_DIAL_HOST = "localhost"


def resolve_address(listen: str) -> Tuple[str, str]:
    """
    Resolves a php-fpm listen directive into a (network, address) pair.

    Accepted forms are 'ip.add.re.ss:port', 'port' and '/path/to/unix/socket'.
    Parsing is lenient: nothing is validated and no error is ever raised.

    :param listen: The listen value as written in the pool config.
    :return tuple: ("tcp", "host:port"), ("tcp", ":port") or ("unix", path).
    """
    if listen.isascii() and listen.isdigit():
        return "tcp", ":" + listen
    if ":" not in listen:
        return "unix", listen

    host, _, port = listen.rpartition(":")
    if not host:
        return "tcp", ":" + port
    return "tcp", f"{host}:{port}"


def split_tcp_address(address: str) -> Tuple[str, str]:
    """
    Splits a resolved tcp address into a (host, port) pair suitable for dialing.

    An empty host means the local system. Brackets around IPv6 hosts are removed.
    The port is returned as given; a non-numeric port fails at dial time.
    """
    host, _, port = address.rpartition(":")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host or DEFAULT_DIAL_HOST, port
