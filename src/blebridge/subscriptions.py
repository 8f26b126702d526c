"""
Routes value change notifications to the characteristic that was subscribed.
"""
import logging
import threading

from blebridge.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)


class Subscription(CommonEqualityMixin, StringerMixin):
    """ the characteristic that a subscription id delivers values for """

    def __init__(self, address, service, characteristic):
        self.address = address
        self.service = service
        self.characteristic = characteristic


class SubscriptionRegistry:
    """
    Maps the subscription id the BLE server returned when notifications were enabled to the
    (address, service, characteristic) that was subscribed.

    An entry exists only while notifications are enabled for the characteristic.
    """

    def __init__(self):
        self._subscriptions = {}
        self._lock = threading.Lock()

    def register(self, subscription_id, address, service, characteristic) -> Subscription:
        subscription = Subscription(address, service, characteristic)
        with self._lock:
            self._subscriptions[subscription_id] = subscription
        return subscription

    def lookup(self, subscription_id):
        """
        :return: the Subscription for the id, or None if the id is not registered.
        """
        with self._lock:
            return self._subscriptions.get(subscription_id)

    def unregister(self, subscription_id):
        """ removes the subscription, returning it, or None if it was not registered """
        with self._lock:
            return self._subscriptions.pop(subscription_id, None)

    def unregister_characteristic(self, address, service, characteristic) -> list:
        """ removes every subscription for the characteristic and returns the ids removed """
        subscription = Subscription(address, service, characteristic)
        with self._lock:
            ids = [sid for sid, s in self._subscriptions.items() if s == subscription]
            for sid in ids:
                del self._subscriptions[sid]
        if not ids:
            logger.warning("no subscription for %s" % (subscription,))
        return ids

    def unregister_address(self, address) -> list:
        """ removes every subscription for a device and returns the ids removed """
        with self._lock:
            ids = [sid for sid, s in self._subscriptions.items() if s.address == address]
            for sid in ids:
                del self._subscriptions[sid]
        return ids

    def clear(self):
        with self._lock:
            self._subscriptions.clear()

    def __len__(self):
        with self._lock:
            return len(self._subscriptions)
