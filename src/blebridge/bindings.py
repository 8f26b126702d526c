"""
The bridge between the host BLE API and the BLE server process.

Commands are sent to the server as frames and return a future for the result. When the result arrives, the bridge
updates its device and subscription tables, completes the future, and fires the outcome event. Unsolicited messages
from the server (scan results, lost devices, value notifications) are translated to events.

Events are fired on the thread that reads the link, except for the outcome of a command sent after the link
closed, which is fired on the thread that sent the command.
"""
import logging
import threading

from blebridge.codecs import Advertisement, address_to_id, decode_characteristic, from_wire_bytes, \
    from_wire_uuid, to_wire_bytes, to_wire_uuid
from blebridge.conduit.base import Conduit
from blebridge.devices import DeviceHandleTable
from blebridge.events import CharacteristicsDiscoverEvent, ConnectEvent, DisconnectEvent, DiscoverEvent, \
    NotifyEvent, ReadEvent, ServicesDiscoverEvent, StateChangeEvent, WriteEvent
from blebridge.protocol.asynchronous import AsyncLoop, FutureValue
from blebridge.protocol.correlator import LinkClosedError, RemoteError, RequestCorrelator
from blebridge.protocol.framing import FrameDecoder, ProtocolError, encode_frame, read_chunk
from blebridge.subscriptions import SubscriptionRegistry
from blebridge.support.events import EventSource

logger = logging.getLogger(__name__)


class MessageTypes:
    """ values of the `_type` field of messages from the server """
    start = 'start'
    start_alias = 'Start'
    scan_result = 'scanResult'
    response = 'response'
    disconnect_event = 'disconnectEvent'
    value_changed_notification = 'valueChangedNotification'


class States:
    unknown = 'unknown'
    powered_on = 'poweredOn'
    powered_off = 'poweredOff'


class BleBridge:
    """
    Drives the BLE server over a conduit. The server's stdout is the conduit input and its stdin the output.

    Listeners added to `events` receive a BridgeEvent for each scan result, state change and command outcome.

    :param conduit: the link to the server.
    :param read_size: the maximum number of bytes read from the link at once.
    """

    def __init__(self, conduit: Conduit, read_size=4096):
        self._conduit = conduit
        self.read_size = read_size
        self._decoder = FrameDecoder()
        self._write_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._link_closed = False
        self.state = States.unknown
        self.correlator = RequestCorrelator(self._send_message)
        self.devices = DeviceHandleTable()
        self.subscriptions = SubscriptionRegistry()
        self.events = EventSource()
        self.async_thread = AsyncLoop(self.background_loop, name='blebridge-reader')
        self._handlers = {
            MessageTypes.start: self._on_start,
            MessageTypes.start_alias: self._on_start,
            MessageTypes.scan_result: self._on_scan_result,
            MessageTypes.response: self.correlator.process_response,
            MessageTypes.disconnect_event: self._on_disconnect_event,
            MessageTypes.value_changed_notification: self._on_value_changed,
        }

    @property
    def link_closed(self):
        return self._link_closed

    def start_background_thread(self):
        self.async_thread.start()

    def close(self):
        """ closes the link. Pending commands fail with LinkClosedError. """
        try:
            self._conduit.close()
        finally:
            self.async_thread.stop()
            self.close_link()

    # commands

    def start_scanning(self, service_uuids=None, allow_duplicates=False):
        """ starts scanning. Scan results are fired as DiscoverEvent. Filtering is not applied. """
        self._send_message({'cmd': 'scan'})

    def stop_scanning(self):
        self._send_message({'cmd': 'stopScan'})

    def connect(self, address) -> FutureValue:
        """
        Connects to a device. The future result is the device handle.
        """
        def connected(handle):
            if handle is None:
                raise RemoteError("connect returned no device handle")
            self.devices.put(address, handle)
            return handle

        return self._command({'cmd': 'connect', 'address': address}, connected,
                             lambda handle, error: ConnectEvent(address, error))

    def disconnect(self, address) -> FutureValue:
        def disconnected(result):
            self._forget_device(address)

        return self._command({'cmd': 'disconnect', 'device': self.devices.get(address)}, disconnected,
                             lambda result, error: DisconnectEvent(address, error))

    def discover_services(self, address, uuids=None) -> FutureValue:
        """
        Lists the services of a connected device. The future result is the list of service uuids.
        Filtering by uuids is not applied.
        """
        return self._command({'cmd': 'services', 'device': self.devices.get(address)},
                             lambda result: [from_wire_uuid(u) for u in result],
                             lambda services, error: ServicesDiscoverEvent(address, services, error))

    def discover_characteristics(self, address, service, characteristic_uuids=None) -> FutureValue:
        """
        Lists the characteristics of a service. The future result is a list of dicts with the `uuid` and
        `properties` of each characteristic. Filtering by characteristic_uuids is not applied.
        """
        return self._command({'cmd': 'characteristics',
                              'device': self.devices.get(address),
                              'service': to_wire_uuid(service)},
                             lambda result: [decode_characteristic(c) for c in result],
                             lambda characteristics, error:
                             CharacteristicsDiscoverEvent(address, service, characteristics, error))

    def read(self, address, service, characteristic) -> FutureValue:
        """ reads the value of a characteristic. The future result is the value as bytes. """
        return self._command(self._characteristic_command('read', address, service, characteristic),
                             from_wire_bytes,
                             lambda data, error: ReadEvent(address, service, characteristic, data, False, error))

    def write(self, address, service, characteristic, data, without_response=False) -> FutureValue:
        message = self._characteristic_command('write', address, service, characteristic)
        message['value'] = to_wire_bytes(data)
        message['withoutResponse'] = bool(without_response)
        return self._command(message, lambda result: None,
                             lambda result, error: WriteEvent(address, service, characteristic, error))

    def notify(self, address, service, characteristic, enable) -> FutureValue:
        """
        Enables or disables notifications for a characteristic. The future result is the enable flag.
        Values pushed by the server are fired as ReadEvent with is_notification set.
        """
        def subscribed(subscription_id):
            if enable:
                self.subscriptions.register(subscription_id, address, service, characteristic)
            else:
                self.subscriptions.unregister_characteristic(address, service, characteristic)
            return enable

        cmd = 'subscribe' if enable else 'unsubscribe'
        return self._command(self._characteristic_command(cmd, address, service, characteristic), subscribed,
                             lambda enabled, error: NotifyEvent(address, service, characteristic, enable, error))

    def _characteristic_command(self, cmd, address, service, characteristic):
        return {
            'cmd': cmd,
            'device': self.devices.get(address),
            'service': to_wire_uuid(service),
            'characteristic': to_wire_uuid(characteristic)
        }

    def _command(self, message, accept, outcome_event) -> FutureValue:
        """
        Sends a request and arranges for the outcome to be handled.
        :param message: the request to send
        :param accept: called with the result of a successful request. Returns the value of the returned future.
            If it raises an exception, the request is considered failed.
        :param outcome_event: called with the value and error to create the event fired when the request completes.
        :return: a future for the value
        """
        outcome = FutureValue()

        def completed(future):
            try:
                value = accept(future.result())
            except Exception as e:
                logger.info("%s failed: %s" % (message.get('cmd'), e))
                outcome.set_exception(e)
                self._fire(outcome_event(None, e))
            else:
                outcome.set_result(value)
                self._fire(outcome_event(value, None))

        self.correlator.send(message).add_done_callback(completed)
        return outcome

    def _send_message(self, message):
        logger.debug("out: %s" % (message,))
        frame = encode_frame(message)
        output = self._conduit.output
        with self._write_lock:
            output.write(frame)
            output.flush()

    # inbound

    def background_loop(self):
        """
        reads and processes the available data from the link. When the link ends, the background thread is stopped.
        """
        if not self.read_available():
            self.async_thread.stop()

    def read_available(self) -> bool:
        """
        Reads the data available from the link and processes the messages it completes.
        :return: False when the link has closed.
        """
        if self._link_closed:
            return False
        try:
            data = read_chunk(self._conduit.input, self.read_size)
        except (OSError, ValueError) as e:
            logger.error("error reading from the BLE server: %s" % e)
            self.close_link(e)
            return False
        if not data:
            logger.info("BLE server closed the link")
            self.close_link()
            return False
        self.feed(data)
        return not self._link_closed

    def feed(self, data):
        """
        Processes data received from the link. A protocol error closes the link.
        """
        try:
            for message in self._decoder.feed(data):
                try:
                    self.process_message(message)
                except ProtocolError:
                    raise
                except Exception as e:
                    logger.exception("error handling message %s: %s" % (message, e))
        except ProtocolError as e:
            logger.error("protocol error, closing the link: %s" % e)
            self.close_link(e)

    def process_message(self, message: dict):
        """
        Routes a message from the server according to its `_type`. Messages with an unknown type are ignored.
        :raises ProtocolError: when the message has no type.
        """
        logger.debug("in: %s" % (message,))
        kind = message.get('_type')
        if not isinstance(kind, str):
            raise ProtocolError("message has no _type: %s" % (message,))
        handler = self._handlers.get(kind)
        if handler is None:
            logger.debug("ignoring message of type %s" % kind)
            return
        handler(message)

    def _on_start(self, message):
        self._set_state(States.powered_on)

    def _on_scan_result(self, message):
        try:
            address = message['bluetoothAddress']
            event = DiscoverEvent(address_to_id(address), address, 'public', True,
                                  Advertisement.from_scan_result(message), message.get('rssi'))
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("dropping malformed scan result %s: %r" % (message, e))
            return
        self._fire(event)

    def _on_disconnect_event(self, message):
        handle = message.get('device')
        if handle is None:
            logger.warning("dropping disconnect event without a device handle: %s" % (message,))
            return
        addresses = self.devices.addresses_for(handle)
        if not addresses:
            logger.warning("disconnect event for unknown device handle %s" % (handle,))
        for address in addresses:
            self._forget_device(address)
            self._fire(DisconnectEvent(address))

    def _on_value_changed(self, message):
        subscription_id = message.get('subscriptionId')
        try:
            subscription = self.subscriptions.lookup(subscription_id)
        except TypeError:
            subscription = None
        if subscription is None:
            logger.warning("dropping notification for unknown subscription %s" % (subscription_id,))
            return
        try:
            data = from_wire_bytes(message.get('value'))
        except (TypeError, ValueError) as e:
            logger.warning("dropping notification with invalid value for %s: %s" % (subscription, e))
            return
        self._fire(ReadEvent(subscription.address, subscription.service, subscription.characteristic, data, True))

    def _forget_device(self, address):
        self.devices.remove(address)
        self.subscriptions.unregister_address(address)

    # link state

    def close_link(self, cause: BaseException=None):
        """
        Handles the link closing. This happens once: pending requests fail with LinkClosedError,
        the device and subscription tables are cleared, and the state changes to poweredOff.
        """
        with self._state_lock:
            if self._link_closed:
                return
            self._link_closed = True
        self.correlator.close(cause if cause is not None else LinkClosedError("the BLE server closed the link"))
        self.devices.clear()
        self.subscriptions.clear()
        self._set_state(States.powered_off)

    def _set_state(self, state):
        self.state = state
        self._fire(StateChangeEvent(state))

    def _fire(self, event):
        self.events.fire(event)
