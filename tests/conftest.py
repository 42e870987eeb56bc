import socket
import struct
import threading

import dns.flags
import dns.message
import dns.rcode
import dns.rrset
import pytest

from ptrlens.models import EndpointError, PTRLookupError
from ptrlens.probe import BaseLookup


class StubLookup(BaseLookup):
    """
    Deterministic lookup for pipeline tests.

    answers maps (ip, endpoint) -> list of hostnames; an entry whose
    value is an exception instance is raised instead. Missing entries
    raise PTRLookupError.
    """

    def __init__(self, answers=None, down=()):
        super().__init__(protocol='udp', timeout=None)
        self.answers = answers or {}
        self.down = set(down)
        self.calls = []
        self._lock = threading.Lock()

    def lookup(self, ip, endpoint):
        with self._lock:
            self.calls.append((ip, endpoint))
        if endpoint in self.down:
            raise EndpointError(f"{endpoint} unreachable")
        result = self.answers.get((ip, endpoint))
        if result is None:
            raise PTRLookupError(f"{ip}: no PTR record")
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def stub_lookup():
    return StubLookup


def answer(wire, records, truncate=False):
    """
    Build the response wire for a query.

    records maps reverse names ("5.2.0.192.in-addr.arpa.") to PTR
    targets; unknown names get NXDOMAIN. A truncated response carries
    the TC flag and no answer.
    """
    query = dns.message.from_wire(wire)
    response = dns.message.make_response(query)
    name = query.question[0].name
    targets = records.get(name.to_text())
    if truncate:
        response.flags |= dns.flags.TC
    elif targets:
        response.answer.append(
            dns.rrset.from_text_list(name, 300, 'IN', 'PTR', targets)
        )
    else:
        response.set_rcode(dns.rcode.NXDOMAIN)
    return response.to_wire()


def recv_exact(conn, size):
    data = b''
    while len(data) < size:
        chunk = conn.recv(size - len(data))
        if not chunk:
            raise EOFError
        data += chunk
    return data


def serve_udp(sock, records, stop, truncate=False):
    while not stop.is_set():
        try:
            wire, addr = sock.recvfrom(65535)
        except socket.timeout:
            continue
        except OSError:
            return
        sock.sendto(answer(wire, records, truncate), addr)


def serve_tcp(listener, records, stop, drop=False):
    while not stop.is_set():
        try:
            conn, _ = listener.accept()
        except socket.timeout:
            continue
        except OSError:
            return
        with conn:
            if drop:
                continue
            conn.settimeout(2)
            try:
                (length,) = struct.unpack('!H', recv_exact(conn, 2))
                reply = answer(recv_exact(conn, length), records)
                conn.sendall(struct.pack('!H', len(reply)) + reply)
            except (OSError, EOFError):
                continue


def udp_socket(port=0):
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(('127.0.0.1', port))
    sock.settimeout(0.1)
    return sock


def tcp_listener(port=0):
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(('127.0.0.1', port))
    sock.listen(16)
    sock.settimeout(0.1)
    return sock


def run_servers(*servers):
    """Start (target, sock, kwargs) servers; returns a stop callable"""
    stop = threading.Event()
    threads = []
    for target, sock, kwargs in servers:
        t = threading.Thread(target=target, args=(sock,), kwargs=dict(kwargs, stop=stop),
                             daemon=True)
        t.start()
        threads.append(t)

    def shutdown():
        stop.set()
        for t in threads:
            t.join(timeout=2)
        for _, sock, _ in servers:
            sock.close()

    return shutdown


@pytest.fixture
def dns_server():
    """
    Minimal UDP DNS server on localhost.

    Yields (port, records) where records maps reverse names to lists
    of PTR targets.
    """
    records = {}
    sock = udp_socket()
    shutdown = run_servers((serve_udp, sock, {'records': records}))
    yield sock.getsockname()[1], records
    shutdown()


@pytest.fixture
def tcp_dns_server():
    """Same as dns_server, over TCP"""
    records = {}
    listener = tcp_listener()
    shutdown = run_servers((serve_tcp, listener, {'records': records}))
    yield listener.getsockname()[1], records
    shutdown()


@pytest.fixture
def truncating_dns_server():
    """
    UDP answers are always truncated; the full answer is only
    available over TCP on the same port.
    """
    records = {}
    listener = tcp_listener()
    port = listener.getsockname()[1]
    sock = udp_socket(port)
    shutdown = run_servers(
        (serve_tcp, listener, {'records': records}),
        (serve_udp, sock, {'records': records, 'truncate': True}),
    )
    yield port, records
    shutdown()


@pytest.fixture
def dropping_tcp_port():
    """A localhost TCP port that accepts connections and closes them at once"""
    listener = tcp_listener()
    shutdown = run_servers((serve_tcp, listener, {'records': {}, 'drop': True}))
    yield listener.getsockname()[1]
    shutdown()


@pytest.fixture
def closed_port():
    """A localhost TCP port with nothing listening on it"""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(('127.0.0.1', 0))
    port = s.getsockname()[1]
    s.close()
    return port
