"""
Abstract base class for PTR lookup strategies
"""

import time
from abc import ABC, abstractmethod
from typing import Optional

from .connect import EndpointProbe


class BaseLookup(ABC):
    """Reverse lookup of one IP through one resolver endpoint"""

    def __init__(self, protocol: str = 'udp', timeout: Optional[float] = None):
        self.protocol = protocol
        self.timeout = timeout
        self.probe = EndpointProbe(protocol=protocol, timeout=timeout)

    @abstractmethod
    def lookup(self, ip: str, endpoint: str) -> list[str]:
        """
        Resolve PTR records for ip via endpoint.

        Args:
            ip: IP address to resolve
            endpoint: Resolver as "host:port"

        Returns:
            Hostnames, fully qualified (trailing dot)

        Raises:
            EndpointError: endpoint could not be reached
            PTRLookupError: no PTR record obtained
        """
        pass

    def _remaining(self, started: float) -> Optional[float]:
        """Time left of the per-lookup deadline that began at started"""
        if self.timeout is None:
            return None
        return max(self.timeout - (time.monotonic() - started), 0.0)

    def cancel(self):
        """Abort outstanding connection attempts"""
        self.probe.cancel()

    def close(self):
        """Clean up resources"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
