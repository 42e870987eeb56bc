import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .models import (
    ConfigError, DEFAULT_PORT, DEFAULT_THREADS, DEFAULT_TIMEOUT,
    LOOKUP_MODES, PROTOCOLS, RunConfig,
)
from .output import ConsoleOutput, OutputSink
from .pipeline import run_pipeline


console = Console(stderr=True)


def build_config(threads: int, resolver: Optional[str], port: int, protocol: str,
                 domain: bool, resolvers_file: Optional[str], timeout: float,
                 mode: str, verbose: bool) -> RunConfig:
    """Turn parsed options into a validated RunConfig"""
    return RunConfig(
        threads=threads,
        resolver_ip=resolver or None,
        port=port,
        protocol=protocol.lower(),
        domain_only=domain,
        resolvers_file=Path(resolvers_file) if resolvers_file else None,
        timeout=timeout if timeout > 0 else None,
        lookup_mode=mode.lower(),
        verbose=verbose,
    ).validate()


@click.command()
@click.option('-t', '--threads', default=DEFAULT_THREADS, type=click.IntRange(min=1),
              help=f'Number of concurrent workers (default: {DEFAULT_THREADS})')
@click.option('-r', '--resolver', default=None,
              help='IP of a DNS resolver to use for lookups')
@click.option('-p', '--port', default=DEFAULT_PORT, type=click.IntRange(1, 65535),
              help=f'Port of the resolver given with -r (default: {DEFAULT_PORT})')
@click.option('-P', '--protocol', default='udp',
              type=click.Choice(PROTOCOLS, case_sensitive=False),
              help='Transport used to reach resolvers (default: udp)')
@click.option('-d', '--domain', is_flag=True,
              help='Output only domains, without the source IP')
@click.option('-f', '--resolvers-file', type=click.Path(dir_okay=False),
              help='File with one resolver (host:port) per line')
@click.option('-w', '--timeout', default=DEFAULT_TIMEOUT, type=click.FloatRange(min=0),
              help=f'Per-lookup timeout in seconds, 0 to wait forever (default: {DEFAULT_TIMEOUT:g})')
@click.option('--mode', default='direct',
              type=click.Choice(LOOKUP_MODES, case_sensitive=False),
              help='direct: query each resolver; probe: check the resolver is '
                   'reachable, then use the system resolver (default: direct)')
@click.option('-v', '--verbose', is_flag=True,
              help='Report failed lookups and a summary on stderr')
@click.version_option(version=__version__)
def main(threads: int, resolver: Optional[str], port: int, protocol: str,
         domain: bool, resolvers_file: Optional[str], timeout: float,
         mode: str, verbose: bool):
    """
    PTRLens - Bulk reverse DNS lookups.

    Reads IP addresses from stdin, one per line, and prints the PTR
    hostnames found for each through the configured resolvers.

    Examples:

        cat ips.txt | ptrlens -r 1.1.1.1

        cat ips.txt | ptrlens -f resolvers.txt -t 32 -d

        cat ips.txt | ptrlens -r 9.9.9.9 -P tcp -w 2
    """
    output = ConsoleOutput(verbose=verbose, console=console)

    try:
        config = build_config(threads, resolver, port, protocol, domain,
                              resolvers_file, timeout, mode, verbose)
    except ConfigError as e:
        output.print_error(str(e))
        sys.exit(1)

    if not config.single_endpoint and not config.resolvers_file:
        output.print_warning("No resolvers configured (use -r or -f); nothing will be resolved")

    try:
        run_pipeline(config, sys.stdin, OutputSink(sys.stdout), output)
    except ConfigError as e:
        output.print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/]")
        sys.exit(130)


if __name__ == '__main__':
    main()
