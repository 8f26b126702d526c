"""
A conduit is a two-way byte channel: a stream to read from and a stream to write to.
"""
from abc import abstractmethod
from io import IOBase


class Conduit:
    """
    The channel between the bridge and the BLE server.
    """

    @property
    @abstractmethod
    def input(self) -> IOBase:
        """ the stream the bridge reads from """
        raise NotImplementedError

    @property
    @abstractmethod
    def output(self) -> IOBase:
        """ the stream the bridge writes to """
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def close(self):
        """ closes both streams """
        raise NotImplementedError


class DefaultConduit(Conduit):
    """
    A conduit over two given streams. When only one stream is given, it is used for reading and writing.
    """

    def __init__(self, read=None, write=None):
        self._input = read
        self._output = read if write is None else write
        self._closed = False

    @property
    def input(self):
        return self._input

    @property
    def output(self):
        return self._output

    @property
    def open(self):
        return not self._closed

    def close(self):
        """ closes the output, then the input. The input is closed even if closing the output fails. """
        self._closed = True
        try:
            if self._output is not None:
                self._output.close()
        finally:
            if self._input is not None:
                self._input.close()
