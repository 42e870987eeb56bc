"""
Resolver worker: drains the work channel and resolves each address
"""

from typing import Optional

from .channel import WorkChannel
from .models import (
    EndpointError, PTRLookupError, ResolverSet, RunConfig, WorkerState,
)
from .output import ConsoleOutput, OutputSink
from .probe import BaseLookup


def format_result(ip: str, hostname: str, domain_only: bool = False) -> str:
    """
    Format one output line.

    Domain-only mode drops the IP and a single trailing dot,
    otherwise the line is "IP<TAB>hostname" with the name as returned.
    """
    if domain_only:
        return hostname[:-1] if hostname.endswith('.') else hostname
    return f"{ip}\t{hostname}"


class ResolverWorker:
    """
    One member of the worker pool.

    Takes addresses from the channel until it is closed and drained.
    Each address is looked up through every resolver in order, and
    every hostname found is written to the sink. Failures of a single
    resolver are skipped.
    """

    def __init__(self, config: RunConfig, resolvers: ResolverSet,
                 channel: WorkChannel, sink: OutputSink, lookup: BaseLookup,
                 console: Optional[ConsoleOutput] = None, name: str = "worker"):
        self.config = config
        self.resolvers = resolvers
        self.channel = channel
        self.sink = sink
        self.lookup = lookup
        self.console = console
        self.name = name
        self.state = WorkerState.WAITING_FOR_WORK
        self.processed = 0
        self.resolved = 0
        self.failures = 0

    def _debug(self, message: str):
        if self.console:
            self.console.print_debug(f"{self.name}: {message}")

    def resolve(self, ip: str):
        """Run the resolver loop for a single address"""
        for endpoint in self.resolvers:
            try:
                hostnames = self.lookup.lookup(ip, endpoint)
            except (EndpointError, PTRLookupError, OSError, ValueError) as e:
                self.failures += 1
                self._debug(f"{ip} via {endpoint}: {e}")
                continue

            for hostname in hostnames:
                self.sink.write_line(format_result(ip, hostname, self.config.domain_only))
                self.resolved += 1

    def run(self):
        try:
            while True:
                self.state = WorkerState.WAITING_FOR_WORK
                ip = self.channel.get()
                if ip is None:
                    break

                self.state = WorkerState.RESOLVING
                self.resolve(ip)
                self.processed += 1
        except OSError as e:
            # Lookup errors are handled in resolve(); this is the sink failing
            if self.console:
                self.console.print_error(f"{self.name}: cannot write results: {e}")
        finally:
            self.state = WorkerState.DONE

    __call__ = run
