"""
Transport connections to resolver endpoints
"""

import errno
import select
import socket
import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from ..models import EndpointError, parse_endpoint


# How often a pending connect re-checks the cancel event
POLL_INTERVAL = 0.25

FAMILIES = {
    'tcp': socket.AF_UNSPEC,
    'udp': socket.AF_UNSPEC,
    'tcp4': socket.AF_INET,
    'udp4': socket.AF_INET,
    'tcp6': socket.AF_INET6,
    'udp6': socket.AF_INET6,
}


def is_stream(protocol: str) -> bool:
    return protocol.startswith('tcp')


class EndpointProbe:
    """
    Opens a socket to a resolver endpoint.

    Stream protocols (tcp, tcp4, tcp6) perform a real handshake,
    datagram protocols (udp, udp4, udp6) only bind the peer address.
    Connection attempts honour an optional deadline and can be
    aborted from another thread with cancel().
    """

    def __init__(self, protocol: str = 'udp', timeout: Optional[float] = None,
                 cancel_event: Optional[threading.Event] = None):
        if protocol not in FAMILIES:
            raise ValueError(f"Unsupported protocol: {protocol}")
        self.protocol = protocol
        self.timeout = timeout
        self.cancel_event = cancel_event or threading.Event()

    @property
    def stream(self) -> bool:
        return is_stream(self.protocol)

    def cancel(self):
        self.cancel_event.set()

    def with_protocol(self, protocol: str) -> 'EndpointProbe':
        """Same deadline and cancel event, different transport"""
        return EndpointProbe(protocol, self.timeout, self.cancel_event)

    def _addresses(self, host: str, port: int) -> list[tuple]:
        sock_type = socket.SOCK_STREAM if self.stream else socket.SOCK_DGRAM
        try:
            return socket.getaddrinfo(host, port, FAMILIES[self.protocol], sock_type)
        except (socket.gaierror, UnicodeError) as e:
            raise EndpointError(f"Cannot resolve endpoint {host}: {e}") from e

    def _wait_connected(self, sock: socket.socket, deadline: Optional[float]):
        """Poll a non-blocking connect until done, cancelled or timed out"""
        while True:
            if self.cancel_event.is_set():
                raise EndpointError("Connection cancelled")

            wait = POLL_INTERVAL
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise EndpointError("Connection timed out")
                wait = min(wait, remaining)

            _, writable, _ = select.select([], [sock], [], wait)
            if writable:
                err = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
                if err:
                    raise EndpointError(f"Connection failed: {errno.errorcode.get(err, err)}")
                return

    def open(self, endpoint: str) -> socket.socket:
        """
        Connect to endpoint and return the socket (non-blocking).

        Raises:
            EndpointError: malformed endpoint, refused, unreachable,
                timed out or cancelled
        """
        if self.cancel_event.is_set():
            raise EndpointError("Connection cancelled")

        try:
            host, port = parse_endpoint(endpoint)
        except ValueError as e:
            raise EndpointError(str(e)) from e

        deadline = None
        if self.timeout is not None:
            deadline = time.monotonic() + self.timeout

        addresses = self._addresses(host, port)
        if not addresses:
            raise EndpointError(f"No usable address for {endpoint}")

        last_error: Optional[Exception] = None
        for family, sock_type, proto, _, addr in addresses:
            sock = socket.socket(family, sock_type, proto)
            try:
                sock.setblocking(False)
                err = sock.connect_ex(addr)
                if err in (errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EAGAIN):
                    self._wait_connected(sock, deadline)
                elif err:
                    raise EndpointError(f"Connection failed: {errno.errorcode.get(err, err)}")
                return sock
            except (EndpointError, OSError) as e:
                sock.close()
                last_error = e
                if self.cancel_event.is_set():
                    break

        if isinstance(last_error, EndpointError):
            raise last_error
        raise EndpointError(f"Cannot connect to {endpoint}: {last_error}")

    @contextmanager
    def connect(self, endpoint: str) -> Iterator[socket.socket]:
        """Connect to endpoint; the socket is closed when the block exits"""
        sock = self.open(endpoint)
        try:
            yield sock
        finally:
            sock.close()
