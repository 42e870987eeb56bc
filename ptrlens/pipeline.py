"""
Pipeline coordinator: producer thread, worker pool, completion barrier
"""

import threading
import time
from typing import Optional, TextIO

from .channel import WorkChannel
from .models import PipelineStats, ResolverFileError, ResolverSet, RunConfig
from .output import ConsoleOutput, OutputSink
from .probe import BaseLookup, create_lookup
from .producer import LineProducer
from .resolvers import build_resolver_set
from .worker import ResolverWorker


def load_resolvers(config: RunConfig, console: ConsoleOutput,
                   stats: PipelineStats) -> ResolverSet:
    """
    Build the resolver set once for all workers.

    If the resolvers file is unusable the error is reported and the
    run continues with the single resolver only (if one was given).
    """
    try:
        return build_resolver_set(config.single_endpoint, config.resolvers_file)
    except ResolverFileError as e:
        console.print_error(str(e))
        stats.resolver_file_error = str(e)
        return build_resolver_set(config.single_endpoint)


def run_pipeline(config: RunConfig, stream: TextIO,
                 sink: Optional[OutputSink] = None,
                 console: Optional[ConsoleOutput] = None,
                 lookup: Optional[BaseLookup] = None) -> PipelineStats:
    """
    Resolve every address on stream and write results to sink.

    Args:
        config: Run settings (validated here)
        stream: Input, one IP address per line
        sink: Result writer (default: stdout)
        console: Diagnostic output (default: stderr)
        lookup: Lookup strategy (default: chosen by config.lookup_mode)

    Returns:
        PipelineStats for the finished run

    Raises:
        ConfigError: invalid configuration, before any work starts
    """
    config.validate()
    sink = sink or OutputSink()
    console = console or ConsoleOutput(verbose=config.verbose)
    stats = PipelineStats(workers=config.threads)

    resolvers = load_resolvers(config, console, stats)
    stats.resolvers = len(resolvers)
    console.print_header(config, len(resolvers))

    own_lookup = lookup is None
    if own_lookup:
        lookup = create_lookup(config)

    channel = WorkChannel()
    producer = LineProducer(stream, channel)
    workers = [
        ResolverWorker(config, resolvers, channel, sink, lookup, console,
                       name=f"worker-{i + 1}")
        for i in range(config.threads)
    ]

    started = time.monotonic()
    threads = [threading.Thread(target=producer.run, name="producer", daemon=True)]
    threads += [
        threading.Thread(target=w.run, name=w.name, daemon=True) for w in workers
    ]

    try:
        for t in threads:
            t.start()
        for t in threads:
            t.join()
    except KeyboardInterrupt:
        lookup.cancel()
        channel.close()
        raise
    finally:
        if own_lookup:
            lookup.close()

    stats.items = producer.produced
    stats.lines = sum(w.resolved for w in workers)
    stats.failures = sum(w.failures for w in workers)
    stats.per_worker = [w.processed for w in workers]
    stats.elapsed = time.monotonic() - started

    console.print_summary(stats)
    return stats
