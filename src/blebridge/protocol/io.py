"""
In-memory streams that stand in for the pipes to the BLE server.
"""
import io
from collections import deque


class DequeReader(io.RawIOBase):
    """
    Takes bytes from the front of a deque. An empty deque reads as the end of the stream.
    """

    def __init__(self, q: deque):
        super().__init__()
        self.q = q

    def readable(self):
        return True

    def readinto(self, buf):
        self._checkClosed()
        n = min(len(buf), len(self.q))
        buf[:n] = bytes(self.q.popleft() for _ in range(n))
        return n


class DequeWriter(io.RawIOBase):
    """ Appends the bytes written to a deque. """

    def __init__(self, q: deque):
        super().__init__()
        self.q = q

    def writable(self):
        return True

    def write(self, buf):
        self._checkClosed()
        data = bytes(buf)
        self.q.extend(data)
        return len(data)


class RWCacheBuffer:
    """
    A buffered reader and writer over one deque: the reader returns what the writer has flushed.
    Not thread-safe.
    """

    def __init__(self):
        self.q = deque()
        self.reader = io.BufferedReader(DequeReader(self.q))
        self.writer = io.BufferedWriter(DequeWriter(self.q))

    def close(self):
        self.writer.close()
        self.reader.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
