"""
Rich diagnostic output for PTRLens (stderr only, results go to the sink)
"""

from typing import Optional
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.text import Text

from ..models import PipelineStats, RunConfig
from .. import __version__


class ConsoleOutput:
    """
    Diagnostic messages on stderr.

    Errors and warnings are always shown, debug lines and the
    run summary only in verbose mode.
    """

    def __init__(self, verbose: bool = False, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self.verbose = verbose

    def print_header(self, config: RunConfig, resolvers: int):
        """Print run settings"""
        if not self.verbose:
            return

        content = Text()
        content.append("🔁 PTRLens", style="bold cyan")
        content.append(f" v{__version__}\n", style="dim")
        content.append(f"Resolvers: {resolvers}", style="dim")
        content.append(f"  |  Protocol: {config.protocol.upper()}", style="dim")
        content.append(f"  |  Workers: {config.threads}", style="dim")
        content.append(f"  |  Mode: {config.lookup_mode}", style="dim")
        timeout = f"{config.timeout:g}s" if config.timeout is not None else "none"
        content.append(f"  |  Timeout: {timeout}", style="dim")

        self.console.print(Panel(content, border_style="cyan", padding=(0, 1)))

    def print_summary(self, stats: PipelineStats):
        """Print run statistics"""
        if not self.verbose:
            return

        content = Text()
        content.append(f"Addresses: {stats.items}\n")
        content.append(f"Lines written: {stats.lines}\n", style="green")
        content.append(f"Failed lookups: {stats.failures}\n",
                       style="yellow" if stats.failures else "dim")
        content.append(f"Elapsed: {stats.elapsed:.2f}s", style="dim")

        self.console.print(Panel(content, title="Summary", border_style="cyan", padding=(0, 1)))

    def print_debug(self, message: str):
        if self.verbose:
            self.console.print(f"[dim]{escape(message)}[/]", highlight=False)

    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[bold red]Error:[/] {escape(message)}")

    def print_warning(self, message: str):
        """Print warning message"""
        self.console.print(f"[yellow]Warning:[/] {escape(message)}")
