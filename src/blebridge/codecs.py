"""
Converts values between the form used on the wire to the BLE server and the form used by the host API.
"""

from blebridge.support.mixins import CommonEqualityMixin, StringerMixin


def to_wire_uuid(uuid: str) -> str:
    """
    >>> to_wire_uuid('0000180d-0000-1000-8000-00805f9b34fb')
    '{0000180d-0000-1000-8000-00805f9b34fb}'
    """
    return '{' + uuid + '}'


def from_wire_uuid(uuid: str) -> str:
    """
    >>> from_wire_uuid('{0000180d-0000-1000-8000-00805f9b34fb}')
    '0000180d-0000-1000-8000-00805f9b34fb'
    """
    return uuid.replace('{', '').replace('}', '')


def to_wire_bytes(data) -> list:
    """
    >>> to_wire_bytes(b'\\x01\\xff')
    [1, 255]
    """
    return list(bytes(data))


def from_wire_bytes(values) -> bytes:
    """
    Raises ValueError when a value is not in the range 0-255, and TypeError when values is not a sequence of integers.

    >>> from_wire_bytes([1, 2, 3])
    b'\\x01\\x02\\x03'
    """
    if not isinstance(values, (list, tuple)):
        raise TypeError("expected a list of byte values, got %r" % (values,))
    return bytes(values)


def address_to_id(address: str) -> str:
    """
    >>> address_to_id('AA:BB:CC:DD:EE:FF')
    'AABBCCDDEEFF'
    """
    return address.replace(':', '')


def decode_properties(properties: dict) -> list:
    """
    Lists the names of the characteristic properties that are set.

    >>> decode_properties({'read': True, 'write': False, 'notify': True})
    ['read', 'notify']
    """
    return [name for name, value in properties.items() if value]


def decode_characteristic(characteristic: dict) -> dict:
    return {
        'uuid': from_wire_uuid(characteristic['uuid']),
        'properties': decode_properties(characteristic.get('properties') or {})
    }


class Advertisement(CommonEqualityMixin, StringerMixin):
    """ The advertisement data from a scan result. """

    def __init__(self, local_name=None, tx_power_level=0, manufacturer_data=None, service_uuids=(),
                 service_data=()):
        self.local_name = local_name
        self.tx_power_level = tx_power_level
        self.manufacturer_data = manufacturer_data
        self.service_uuids = list(service_uuids)
        self.service_data = list(service_data)

    @classmethod
    def from_scan_result(cls, message: dict):
        return cls(local_name=message.get('localName'),
                   service_uuids=[from_wire_uuid(u) for u in message.get('serviceUuids') or ()])

    def as_dict(self):
        """ the advertisement with the field names used by the host API """
        return {
            'localName': self.local_name,
            'txPowerLevel': self.tx_power_level,
            'manufacturerData': self.manufacturer_data,
            'serviceUuids': list(self.service_uuids),
            'serviceData': list(self.service_data),
        }
