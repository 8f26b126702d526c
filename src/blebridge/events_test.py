import unittest

from hamcrest import assert_that, calling, is_, is_not, raises

from blebridge.codecs import Advertisement
from blebridge.events import BridgeEvent, CharacteristicsDiscoverEvent, ConnectEvent, DisconnectEvent, \
    DiscoverEvent, NotifyEvent, ReadEvent, ServicesDiscoverEvent, StateChangeEvent, WriteEvent
from blebridge.protocol.correlator import RemoteError


class BridgeEventTest(unittest.TestCase):

    def test_args_is_abstract(self):
        assert_that(calling(lambda: BridgeEvent().args), raises(NotImplementedError))

    def test_events_compare_by_value(self):
        assert_that(ConnectEvent('AA'), is_(ConnectEvent('AA', None)))
        assert_that(ConnectEvent('AA'), is_not(DisconnectEvent('AA')))
        assert_that(ConnectEvent('AA'), is_not(ConnectEvent('BB')))

    def test_names(self):
        assert_that([e.name for e in (StateChangeEvent, DiscoverEvent, ConnectEvent, DisconnectEvent,
                                      ServicesDiscoverEvent, CharacteristicsDiscoverEvent, ReadEvent,
                                      WriteEvent, NotifyEvent)],
                    is_(['stateChange', 'discover', 'connect', 'disconnect', 'servicesDiscover',
                         'characteristicsDiscover', 'read', 'write', 'notify']))


class EventArgsTest(unittest.TestCase):
    error = RemoteError('failed')

    def test_state_change(self):
        assert_that(StateChangeEvent('poweredOn').args, is_(('poweredOn',)))

    def test_discover(self):
        event = DiscoverEvent('AABB', 'AA:BB', 'public', True, Advertisement('HRM', service_uuids=['180d']), -60)
        assert_that(event.args, is_(('AABB', 'AA:BB', 'public', True,
                                     {'localName': 'HRM', 'txPowerLevel': 0, 'manufacturerData': None,
                                      'serviceUuids': ['180d'], 'serviceData': []}, -60)))

    def test_connect(self):
        assert_that(ConnectEvent('AA').args, is_(('AA', None)))
        assert_that(ConnectEvent('AA', self.error).args, is_(('AA', self.error)))

    def test_services_discover(self):
        assert_that(ServicesDiscoverEvent('AA', ['180d']).args, is_(('AA', ['180d'])))
        assert_that(ServicesDiscoverEvent('AA', None, self.error).args, is_(('AA', self.error)))

    def test_characteristics_discover(self):
        chars = [{'uuid': '2a37', 'properties': ['notify']}]
        assert_that(CharacteristicsDiscoverEvent('AA', '180d', chars).args, is_(('AA', '180d', chars)))
        assert_that(CharacteristicsDiscoverEvent('AA', '180d', None, self.error).args,
                    is_(('AA', '180d', self.error)))

    def test_read(self):
        assert_that(ReadEvent('AA', '180d', '2a37', b'\x01', True).args, is_(('AA', '180d', '2a37', b'\x01', True)))
        assert_that(ReadEvent('AA', '180d', '2a37', None, False, self.error).args,
                    is_(('AA', '180d', '2a37', self.error, False)))

    def test_write(self):
        assert_that(WriteEvent('AA', '180d', '2a37').args, is_(('AA', '180d', '2a37')))
        assert_that(WriteEvent('AA', '180d', '2a37', self.error).args, is_(('AA', '180d', '2a37', self.error)))

    def test_notify(self):
        assert_that(NotifyEvent('AA', '180d', '2a37', True).args, is_(('AA', '180d', '2a37', True)))
        assert_that(NotifyEvent('AA', '180d', '2a37', False, self.error).args,
                    is_(('AA', '180d', '2a37', self.error)))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
