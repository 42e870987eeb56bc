"""
Data models for PTRLens
"""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional


PROTOCOLS = ('udp', 'udp4', 'udp6', 'tcp', 'tcp4', 'tcp6')
LOOKUP_MODES = ('direct', 'probe')

DEFAULT_THREADS = 8
DEFAULT_PORT = 53
DEFAULT_TIMEOUT = 5.0


class PTRLensError(Exception):
    """Base class for PTRLens errors"""


class ConfigError(PTRLensError):
    """Invalid run configuration"""


class ResolverFileError(PTRLensError, OSError):
    """Resolvers file could not be opened or read"""


class EndpointError(PTRLensError):
    """Resolver endpoint unreachable or not answering"""


class PTRLookupError(PTRLensError):
    """No PTR record could be obtained"""


class WorkerState(Enum):
    """Lifecycle of a resolver worker"""
    WAITING_FOR_WORK = "waiting_for_work"
    RESOLVING = "resolving"
    DONE = "done"


def format_endpoint(host: str, port: int) -> str:
    """Join host and port, bracketing IPv6 literals"""
    if ':' in host and not host.startswith('['):
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def parse_endpoint(endpoint: str) -> tuple[str, int]:
    """
    Split a "host:port" resolver string.

    Accepts "[v6]:port" for IPv6 literals.

    Raises:
        ValueError: if the string has no usable port
    """
    endpoint = endpoint.strip()
    if endpoint.startswith('['):
        host, sep, port = endpoint[1:].partition(']:')
        if not sep:
            raise ValueError(f"Malformed endpoint: {endpoint!r}")
    else:
        host, sep, port = endpoint.rpartition(':')
        if not sep or ':' in host:
            raise ValueError(f"Malformed endpoint: {endpoint!r}")

    if not host or not port.isdigit():
        raise ValueError(f"Malformed endpoint: {endpoint!r}")

    port_num = int(port)
    if not 0 < port_num < 65536:
        raise ValueError(f"Port out of range: {endpoint!r}")
    return host, port_num


@dataclass(frozen=True)
class ResolverSet:
    """Ordered resolver endpoints, fixed for the whole run"""
    endpoints: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.endpoints)

    def __len__(self) -> int:
        return len(self.endpoints)

    def __bool__(self) -> bool:
        return bool(self.endpoints)


@dataclass(frozen=True)
class RunConfig:
    """Process-wide settings, populated once before the workers start"""
    threads: int = DEFAULT_THREADS
    resolver_ip: Optional[str] = None
    port: int = DEFAULT_PORT
    protocol: str = 'udp'
    domain_only: bool = False
    resolvers_file: Optional[Path] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT  # None = wait forever
    lookup_mode: str = 'direct'
    verbose: bool = False

    @property
    def single_endpoint(self) -> Optional[str]:
        if not self.resolver_ip:
            return None
        return format_endpoint(self.resolver_ip, self.port)

    def validate(self) -> 'RunConfig':
        """
        Check every field before any work begins.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigError: on the first invalid field
        """
        if self.threads < 1:
            raise ConfigError(f"Thread count must be at least 1, got {self.threads}")
        if not 0 < self.port < 65536:
            raise ConfigError(f"Port must be between 1 and 65535, got {self.port}")
        if self.protocol not in PROTOCOLS:
            raise ConfigError(
                f"Unknown protocol {self.protocol!r} (expected one of {', '.join(PROTOCOLS)})"
            )
        if self.lookup_mode not in LOOKUP_MODES:
            raise ConfigError(
                f"Unknown lookup mode {self.lookup_mode!r} "
                f"(expected one of {', '.join(LOOKUP_MODES)})"
            )
        if self.timeout is not None and self.timeout < 0:
            raise ConfigError(f"Timeout cannot be negative, got {self.timeout}")
        return self


@dataclass
class PipelineStats:
    """Summary of a finished run"""
    items: int = 0
    lines: int = 0
    failures: int = 0
    resolvers: int = 0
    workers: int = 0
    elapsed: float = 0.0
    resolver_file_error: Optional[str] = None
    per_worker: list[int] = field(default_factory=list)


def is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        return False
