import unittest
from unittest.mock import Mock

from hamcrest import assert_that, calling, instance_of, is_, raises

from blebridge.connector.base import AbstractConnector, ConnectionNotAvailableError, ConnectionNotConnectedError, \
    ConnectorConnectedEvent, ConnectorDisconnectedEvent, ConnectorError
from blebridge.support.events import EventSource


class StubConnector(AbstractConnector):
    """ a connector whose availability and conduit are set by the test """

    def __init__(self, available=True):
        super().__init__()
        self.is_available = available
        self.next_conduit = Mock()
        self.next_conduit.open = True

    @property
    def endpoint(self):
        return 'stub'

    def _try_available(self):
        return self.is_available

    def _connect(self):
        return self.next_conduit


class ConnectorEventsTest(unittest.TestCase):

    def test_events_compare_by_connector_and_kind(self):
        source = object()
        assert_that(ConnectorConnectedEvent(source), is_(ConnectorConnectedEvent(source)))
        assert_that(ConnectorConnectedEvent(source).connector, is_(source))
        assert_that(ConnectorConnectedEvent(source) == ConnectorDisconnectedEvent(source), is_(False))
        assert_that(ConnectorConnectedEvent(source) == ConnectorConnectedEvent(object()), is_(False))


class AbstractConnectorTest(unittest.TestCase):

    def setUp(self):
        self.sut = StubConnector()
        self.listener = Mock()
        self.sut.events += self.listener

    def test_initially_disconnected(self):
        sut = AbstractConnector()
        assert_that(sut.events, is_(instance_of(EventSource)))
        assert_that(sut.connected, is_(False))
        assert_that(calling(sut._connect), raises(NotImplementedError))
        assert_that(calling(sut._try_available), raises(NotImplementedError))

    def test_conduit_requires_a_connection(self):
        assert_that(calling(getattr).with_args(self.sut, 'conduit'),
                    raises(ConnectionNotConnectedError, 'stub is not connected'))

    def test_connect(self):
        self.sut.connect()
        assert_that(self.sut.connected, is_(True))
        assert_that(self.sut.conduit, is_(self.sut.next_conduit))
        assert_that(self.sut.available, is_(False))
        self.listener.assert_called_once_with(ConnectorConnectedEvent(self.sut))

    def test_connect_when_connected_does_nothing(self):
        self.sut.connect()
        self.sut.connect()
        self.listener.assert_called_once()

    def test_connect_not_available(self):
        self.sut.is_available = False
        assert_that(self.sut.available, is_(False))
        assert_that(calling(self.sut.connect), raises(ConnectionNotAvailableError, 'stub is not available'))
        self.listener.assert_not_called()

    def test_connect_failure(self):
        self.sut._connect = Mock(side_effect=ConnectorError('unable to start'))
        assert_that(calling(self.sut.connect), raises(ConnectorError))
        assert_that(self.sut.connected, is_(False))
        self.listener.assert_not_called()

    def test_closed_conduit_is_not_connected(self):
        self.sut.connect()
        self.sut.next_conduit.open = False
        assert_that(self.sut.connected, is_(False))

    def test_reconnect_releases_a_closed_conduit(self):
        self.sut.connect()
        stale = self.sut.next_conduit
        stale.open = False
        self.sut.next_conduit = Mock(open=True)
        self.sut.connect()
        stale.close.assert_called_once()
        assert_that(self.sut.conduit, is_(self.sut.next_conduit))
        assert_that([c[0][0] for c in self.listener.call_args_list],
                    is_([ConnectorConnectedEvent(self.sut), ConnectorDisconnectedEvent(self.sut),
                         ConnectorConnectedEvent(self.sut)]))

    def test_disconnect(self):
        self.sut.connect()
        self.listener.reset_mock()
        self.sut.disconnect()
        self.sut.next_conduit.close.assert_called_once()
        assert_that(self.sut.connected, is_(False))
        self.listener.assert_called_once_with(ConnectorDisconnectedEvent(self.sut))

    def test_disconnect_when_disconnected_does_nothing(self):
        self.sut.disconnect()
        self.listener.assert_not_called()

    def test_disconnect_reports_even_when_close_fails(self):
        self.sut.connect()
        self.sut.next_conduit.close.side_effect = OSError('broken pipe')
        assert_that(calling(self.sut.disconnect), raises(OSError))
        self.listener.assert_called_with(ConnectorDisconnectedEvent(self.sut))
        assert_that(self.sut.connected, is_(False))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
