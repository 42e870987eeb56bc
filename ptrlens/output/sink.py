"""
Line-oriented result writer shared by all workers
"""

import sys
import threading
from typing import Optional, TextIO


class OutputSink:
    """
    Thread-safe line writer.

    Each write_line() call lands as one whole line. Lines from
    different workers may interleave in any order.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()
        self.lines_written = 0

    def write_line(self, text: str):
        with self._lock:
            self.stream.write(text + "\n")
            self.stream.flush()
            self.lines_written += 1
