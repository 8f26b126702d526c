"""
Futures for results that arrive later, and a loop that runs on a background thread.
"""
import logging
import threading
from concurrent.futures import Future
from typing import Callable

logger = logging.getLogger(__name__)


class FutureValue(Future):
    """ A result that may not have arrived yet. """


class AsyncLoop:
    """
    Calls a function over and over on a daemon thread until stopped.
    An exception raised by the function is logged and the loop carries on.
    """

    def __init__(self, fn: Callable=None, args=(), name=None):
        self.fn = fn
        self.args = args
        self.name = name
        self._stopped = threading.Event()
        self.background_thread = None

    def start(self):
        """ starts the thread, unless it is already running. """
        if self.background_thread is None:
            self.background_thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self.background_thread.start()

    def running(self):
        return not self._stopped.is_set()

    def stop(self):
        """
        Signals the loop to finish and waits for the thread to exit.
        When called from the loop itself, the loop finishes after the current call returns.
        """
        self._stopped.set()
        thread, self.background_thread = self.background_thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self):
        while self.running():
            self.run_once()
        logger.info("%s exiting" % (self.name or 'background thread'))

    def run_once(self):
        try:
            self.fn(*self.args)
        except Exception as e:
            logger.exception("%s: %s" % (self.name or 'background thread', e))
