"""
The events fired by the bridge to the host BLE API.

Each event has the `name` the host API uses for it, and `args`, the positional arguments the host API expects,
in order. Outcome events for commands carry `error`, which is None when the command succeeded.
"""
from blebridge.support.mixins import CommonEqualityMixin, StringerMixin


class BridgeEvent(CommonEqualityMixin, StringerMixin):
    """
    The base event class for all bridge events.
    """
    name = None

    @property
    def args(self) -> tuple:
        raise NotImplementedError


class StateChangeEvent(BridgeEvent):
    """ The adapter power state changed. state is 'poweredOn' or 'poweredOff'. """
    name = 'stateChange'

    def __init__(self, state):
        self.state = state

    @property
    def args(self):
        return self.state,


class DiscoverEvent(BridgeEvent):
    """ A device was seen while scanning. """
    name = 'discover'

    def __init__(self, uuid, address, address_type, connectable, advertisement, rssi):
        self.uuid = uuid
        self.address = address
        self.address_type = address_type
        self.connectable = connectable
        self.advertisement = advertisement
        self.rssi = rssi

    @property
    def args(self):
        return self.uuid, self.address, self.address_type, self.connectable, self.advertisement.as_dict(), self.rssi


class DeviceEvent(BridgeEvent):
    """ an outcome event for a device. """

    def __init__(self, address, error=None):
        self.address = address
        self.error = error

    @property
    def args(self):
        return self.address, self.error


class ConnectEvent(DeviceEvent):
    name = 'connect'


class DisconnectEvent(DeviceEvent):
    """ The device disconnected, either on request, or when the server reports the device was lost. """
    name = 'disconnect'


class ServicesDiscoverEvent(BridgeEvent):
    name = 'servicesDiscover'

    def __init__(self, address, service_uuids, error=None):
        self.address = address
        self.service_uuids = service_uuids
        self.error = error

    @property
    def args(self):
        return self.address, self.error if self.error is not None else self.service_uuids


class CharacteristicsDiscoverEvent(BridgeEvent):
    name = 'characteristicsDiscover'

    def __init__(self, address, service, characteristics, error=None):
        self.address = address
        self.service = service
        self.characteristics = characteristics
        self.error = error

    @property
    def args(self):
        return self.address, self.service, self.error if self.error is not None else self.characteristics


class CharacteristicEvent(BridgeEvent):
    """ an outcome event for a characteristic. """

    def __init__(self, address, service, characteristic, error=None):
        self.address = address
        self.service = service
        self.characteristic = characteristic
        self.error = error


class ReadEvent(CharacteristicEvent):
    """
    The value of a characteristic. is_notification is False when the value was read by a read command,
    and True when the server pushed the value to a subscription.
    """
    name = 'read'

    def __init__(self, address, service, characteristic, data, is_notification, error=None):
        super().__init__(address, service, characteristic, error)
        self.data = data
        self.is_notification = is_notification

    @property
    def args(self):
        return self.address, self.service, self.characteristic, \
            self.error if self.error is not None else self.data, self.is_notification


class WriteEvent(CharacteristicEvent):
    name = 'write'

    @property
    def args(self):
        args = self.address, self.service, self.characteristic
        return args if self.error is None else args + (self.error,)


class NotifyEvent(CharacteristicEvent):
    name = 'notify'

    def __init__(self, address, service, characteristic, enabled, error=None):
        super().__init__(address, service, characteristic, error)
        self.enabled = enabled

    @property
    def args(self):
        return self.address, self.service, self.characteristic, \
            self.error if self.error is not None else self.enabled
