"""
Line producer: feeds input lines into the work channel
"""

from typing import TextIO

from .channel import ChannelClosed, WorkChannel


class LineProducer:
    """
    Reads the input stream to the end and pushes one work item
    per non-blank line.

    The channel is closed when the stream is exhausted, including
    when reading fails part way through.
    """

    def __init__(self, stream: TextIO, channel: WorkChannel):
        self.stream = stream
        self.channel = channel
        self.produced = 0

    def run(self):
        try:
            for line in self.stream:
                item = line.strip()
                if not item:
                    continue
                self.channel.put(item)
                self.produced += 1
        except (OSError, UnicodeDecodeError, ValueError, ChannelClosed):
            # Treated as end of input
            pass
        finally:
            self.channel.close()

    __call__ = run
