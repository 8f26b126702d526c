import logging
import subprocess

from blebridge.conduit.base import Conduit
from blebridge.protocol.asynchronous import AsyncLoop

logger = logging.getLogger(__name__)


class ProcessConduit(Conduit):
    """
    A conduit to a child process: the bridge reads the process's stdout and writes to its stdin.
    Each line the process writes to stderr is logged as an error.

    :param args: the executable followed by its arguments.
    :param cwd: the working directory for the process.
    :raises OSError, ValueError: when the process cannot be started.
    """

    def __init__(self, *args, cwd=None):
        self.process = subprocess.Popen(args, cwd=cwd, stdin=subprocess.PIPE, stdout=subprocess.PIPE,
                                        stderr=subprocess.PIPE)
        self._input = self.process.stdout
        self._output = self.process.stdin
        self.stderr_loop = AsyncLoop(self._log_stderr, args=(self.process.stderr,), name='blebridge-stderr')
        self.stderr_loop.start()

    @property
    def input(self):
        return self._input

    @property
    def output(self):
        return self._output

    @property
    def open(self):
        """ open while the process is running and the conduit has not been closed """
        return self.process is not None and self.process.poll() is None

    def _log_stderr(self, stream):
        line = stream.readline()
        if line:
            logger.error("BLEServer: %s" % line.decode('utf-8', errors='replace').rstrip())
        else:
            self.stderr_loop.stop()

    def close(self):
        """ terminates the process and waits for it to exit. Closing again does nothing. """
        process, self.process = self.process, None
        if process is None:
            return
        process.terminate()
        logger.info("BLE server exited with code %s" % process.wait())
        self.stderr_loop.stop()
        for stream in (process.stdin, process.stdout, process.stderr):
            try:
                stream.close()
            except OSError as e:
                logger.debug("error closing process stream: %s" % e)
