"""
A connector owns the conduit to an endpoint. It opens the conduit on connect() and closes it on disconnect(),
telling its listeners about each.
"""
import logging
from abc import abstractmethod

from blebridge.conduit.base import Conduit
from blebridge.support.events import EventSource
from blebridge.support.mixins import CommonEqualityMixin

logger = logging.getLogger(__name__)


class ConnectorError(Exception):
    """ The connector could not connect to its endpoint. """


class ConnectionNotAvailableError(ConnectorError):
    """ The endpoint cannot be connected to. """


class ConnectionNotConnectedError(ConnectorError):
    """ The conduit was requested while the connector was disconnected. """


class ConnectorEvent(CommonEqualityMixin):
    def __init__(self, connector):
        self.connector = connector


class ConnectorConnectedEvent(ConnectorEvent):
    pass


class ConnectorDisconnectedEvent(ConnectorEvent):
    pass


class AbstractConnector:
    """
    Manages the conduit to an endpoint. Listeners added to `events` receive a ConnectorConnectedEvent once the
    conduit is open and a ConnectorDisconnectedEvent once it is closed.

    Subclasses name the endpoint, decide whether it is available, and open the conduit.
    """

    def __init__(self):
        self.events = EventSource()
        self._conduit = None

    @property
    @abstractmethod
    def endpoint(self):
        raise NotImplementedError

    @abstractmethod
    def _try_available(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def _connect(self) -> Conduit:
        """ opens the conduit. Raises ConnectorError when the endpoint cannot be reached. """
        raise NotImplementedError

    @property
    def connected(self) -> bool:
        return self._conduit is not None and self._conduit.open

    @property
    def available(self) -> bool:
        """ True when the connector is disconnected and the endpoint can be connected to. """
        return not self.connected and self._try_available()

    @property
    def conduit(self) -> Conduit:
        if not self.connected:
            raise ConnectionNotConnectedError("%s is not connected" % (self.endpoint,))
        return self._conduit

    def connect(self):
        """
        Opens the conduit. Does nothing when already connected.
        :raises ConnectorError: when the endpoint is not available or cannot be reached.
        """
        if self.connected:
            return
        # a conduit whose far end has gone is released first
        self.disconnect()
        if not self._try_available():
            raise ConnectionNotAvailableError("%s is not available" % (self.endpoint,))
        self._conduit = self._connect()
        logger.info("connected to %s" % (self.endpoint,))
        self.events.fire(ConnectorConnectedEvent(self))

    def disconnect(self):
        """ Closes the conduit. Does nothing when there is no conduit. """
        conduit, self._conduit = self._conduit, None
        if conduit is None:
            return
        try:
            conduit.close()
        finally:
            logger.info("disconnected from %s" % (self.endpoint,))
            self.events.fire(ConnectorDisconnectedEvent(self))
