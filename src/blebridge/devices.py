"""
Tracks the handle the BLE server assigned to each connected device.
"""
import logging
import threading

logger = logging.getLogger(__name__)


class DeviceHandleTable:
    """
    Maps a device address to the opaque handle the BLE server returned when the device connected.
    An address has a handle only while the device is connected.
    """

    def __init__(self):
        self._handles = {}
        self._lock = threading.Lock()

    def put(self, address, handle):
        with self._lock:
            self._handles[address] = handle

    def get(self, address):
        """
        Retrieves the handle for a connected device.
        :return: the handle, or None when the device is not connected. The BLE server rejects commands
            sent without a handle.
        """
        with self._lock:
            handle = self._handles.get(address)
        if handle is None:
            logger.warning("no handle for device %s, it is not connected" % address)
        return handle

    def remove(self, address):
        """ removes the handle for the device, returning the handle removed, or None """
        with self._lock:
            return self._handles.pop(address, None)

    def addresses_for(self, handle) -> list:
        """ lists every address mapped to the given handle. """
        with self._lock:
            return [address for address, h in self._handles.items() if h == handle]

    def clear(self):
        with self._lock:
            self._handles.clear()

    def __contains__(self, address):
        with self._lock:
            return address in self._handles

    def __len__(self):
        with self._lock:
            return len(self._handles)
