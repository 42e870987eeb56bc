"""
Reachability probe followed by a system resolver lookup
"""

import socket
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Optional

from ..models import PTRLookupError, is_ip_address
from .base import BaseLookup


class SystemLookup(BaseLookup):
    """
    Legacy lookup mode.

    The endpoint is only connected to as a reachability check; the
    PTR lookup itself goes through the operating system resolver.
    Lookups run in a thread pool so the timeout can be enforced.
    """

    def __init__(self, protocol: str = 'udp', timeout: Optional[float] = None,
                 max_workers: int = 8):
        super().__init__(protocol, timeout)
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

    def _resolve_sync(self, ip: str) -> list[str]:
        """Synchronous PTR lookup"""
        hostname, aliases, _ = socket.gethostbyaddr(ip)
        names = [hostname] + [a for a in aliases if a != hostname]
        return [n if n.endswith('.') else n + '.' for n in names]

    def lookup(self, ip: str, endpoint: str) -> list[str]:
        if not is_ip_address(ip):
            raise PTRLookupError(f"Not an IP address: {ip!r}")

        started = time.monotonic()
        with self.probe.connect(endpoint):
            pass

        future = self._executor.submit(self._resolve_sync, ip)
        try:
            return future.result(timeout=self._remaining(started))
        except FutureTimeout as e:
            future.cancel()
            raise PTRLookupError(f"{ip}: lookup timed out") from e
        except (socket.herror, socket.gaierror, OSError) as e:
            raise PTRLookupError(f"{ip}: {e}") from e

    def close(self):
        """Shutdown thread pool"""
        self._executor.shutdown(wait=False)
