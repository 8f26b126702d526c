"""
Starts the BLE server process and connects a bridge to it.

The module attributes below are defaults, overridden from server.cfg files in this directory and ~/server.cfg.
"""
import logging
import os
import sys

from blebridge.bindings import BleBridge
from blebridge.config.config import configure_module
from blebridge.connector.base import AbstractConnector, ConnectorDisconnectedEvent
from blebridge.connector.processconn import ProcessConnector

logger = logging.getLogger(__name__)

# the BLE server executable. A relative path is relative to this package.
executable = os.path.join('prebuilt', 'BLEServer.exe')
# extra command line arguments for the BLE server
args = []
# the maximum number of bytes read from the BLE server at once
read_size = 4096


def load_settings():
    configure_module(sys.modules[__name__])


def executable_path(image=None):
    image = image or executable
    return image if os.path.isabs(image) else os.path.join(os.path.dirname(os.path.abspath(__file__)), image)


class ServerBridge(BleBridge):
    """
    A bridge to a BLE server started by a connector.
    The link closes when the connector disconnects. When the link closes for any other reason, or the bridge is closed,
    the connector is disconnected.
    """

    def __init__(self, connector: AbstractConnector, read_size=4096):
        super().__init__(connector.conduit, read_size)
        self.connector = connector
        connector.events.add(self._connector_events)

    def _connector_events(self, event):
        if isinstance(event, ConnectorDisconnectedEvent):
            self.close_link()

    def close_link(self, cause: BaseException=None):
        """ also stops the server when the link closes on end of stream, a read error or a protocol error. """
        super().close_link(cause)
        if self.connector.connected:
            try:
                self.connector.disconnect()
            except OSError as e:
                logger.warning("error stopping the BLE server: %s" % e)

    def close(self):
        try:
            self.connector.disconnect()
        finally:
            super().close()


def open_bridge(image=None, cwd=None) -> ServerBridge:
    """
    Starts the BLE server and returns a bridge to it, reading from the server on a background thread.
    :param image: the BLE server executable. When not given, the configured executable is used.
    :raises ConnectorError: when the server cannot be started.
    """
    load_settings()
    connector = ProcessConnector(executable_path(image), list(args), cwd)
    connector.connect()
    logger.info("connected to BLE server %s" % connector.endpoint)
    bridge = ServerBridge(connector, read_size)
    bridge.start_background_thread()
    return bridge
