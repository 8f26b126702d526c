import logging
import os

from blebridge.conduit.process_conduit import ProcessConduit
from blebridge.connector.base import AbstractConnector, ConnectorError

logger = logging.getLogger(__name__)


def is_executable(path):
    return os.path.isfile(path) and os.access(path, os.X_OK)


class ProcessConnector(AbstractConnector):
    """
    Starts an executable and connects to its standard input and output.

    :param image: the path of the executable
    :param args: command line arguments for the executable
    :param cwd: the working directory of the process
    """

    def __init__(self, image, args=None, cwd=None):
        super().__init__()
        self.image = image
        self.args = list(args or ())
        self.cwd = cwd

    @property
    def endpoint(self):
        return self.image

    def _try_available(self):
        return is_executable(self.image)

    def _connect(self):
        try:
            return ProcessConduit(self.image, *self.args, cwd=self.cwd)
        except (OSError, ValueError) as e:
            logger.error("unable to start %s: %s" % (self.image, e))
            raise ConnectorError("unable to start %s" % (self.image,)) from e
