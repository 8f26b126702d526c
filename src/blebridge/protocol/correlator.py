"""
Pairs requests sent to the BLE server with the responses that come back.

Every request is tagged with an `_id` that the server echoes in its response. Responses can arrive in any order,
so a response is matched by id alone.
"""
import itertools
import logging
import threading
from typing import Callable

from blebridge.protocol.asynchronous import FutureValue

logger = logging.getLogger(__name__)


class RemoteError(Exception):
    """ The BLE server reported an error for a request. """


class LinkClosedError(IOError):
    """ The link to the BLE server closed before a response was received. """


class FutureResponse(FutureValue):
    """ The future result of the request with the given id. """

    def __init__(self, request_id):
        super().__init__()
        self._request_id = request_id

    @property
    def request_id(self):
        return self._request_id


class RequestCorrelator:
    """
    Assigns ids to outbound requests and completes the future for each request when the response with the same id
    arrives.

    Each future is completed exactly once: by its response, or with a LinkClosedError when the link closes.
    Responses for ids that are not pending are ignored.

    :param transmit: a callable that writes a single message to the link.
    """

    def __init__(self, transmit: Callable[[dict], None]):
        self._transmit = transmit
        self._ids = itertools.count()
        self._pending = {}
        self._lock = threading.RLock()
        self._closed = None

    @property
    def closed(self):
        return self._closed is not None

    @property
    def pending_ids(self):
        with self._lock:
            return sorted(self._pending)

    def send(self, payload: dict) -> FutureResponse:
        """ Sends a request and returns the future response.
        :param payload: the request message. A copy is sent with the `_id` field added.
        :return: A FutureResponse that completes with the `result` of the response, or fails with the error.
        """
        with self._lock:
            request_id = next(self._ids)
            request = dict(payload, _id=request_id)
            future = FutureResponse(request_id)
            closed = self._closed
            if closed is None:
                self._pending[request_id] = future

        if closed is not None:
            future.set_exception(self._link_closed(closed))
            return future

        try:
            self._transmit(request)
        except (OSError, ValueError) as e:
            logger.error("unable to send request %d: %s" % (request_id, e))
            self.reject(request_id, e)
        return future

    def resolve(self, request_id, result) -> bool:
        """ completes the pending request with the given result.
        :return: True if a pending request was completed.
        """
        future = self._take(request_id)
        if future is not None:
            future.set_result(result)
        return future is not None

    def reject(self, request_id, error: BaseException) -> bool:
        """ fails the pending request with the given error.
        :return: True if a pending request was completed.
        """
        future = self._take(request_id)
        if future is not None:
            future.set_exception(error)
        return future is not None

    def process_response(self, message: dict) -> bool:
        """ completes the request that a response message answers. """
        request_id = message.get('_id')
        error = message.get('error')
        if isinstance(request_id, bool) or not isinstance(request_id, int):
            logger.warning("response without a request id: %s" % (message,))
            return False
        if error:
            handled = self.reject(request_id, RemoteError(error))
        else:
            handled = self.resolve(request_id, message.get('result'))
        if not handled:
            logger.warning("no pending request for response id %s" % (request_id,))
        return handled

    def close(self, cause: BaseException=None) -> int:
        """
        Fails every pending request with a LinkClosedError. Requests sent after closing fail immediately.
        :param cause: the reason the link closed, chained to each error.
        :return: the number of requests that were failed.
        """
        with self._lock:
            if self._closed is None:
                self._closed = cause if cause is not None else LinkClosedError("link closed")
            pending = self._pending
            self._pending = {}

        for request_id in sorted(pending):
            pending[request_id].set_exception(self._link_closed(self._closed))
        if pending:
            logger.info("failed %d pending requests on link close" % len(pending))
        return len(pending)

    def _take(self, request_id):
        with self._lock:
            return self._pending.pop(request_id, None)

    @staticmethod
    def _link_closed(cause):
        if isinstance(cause, LinkClosedError):
            return LinkClosedError(*cause.args)
        error = LinkClosedError("link closed: %s" % cause)
        error.__cause__ = cause
        return error
