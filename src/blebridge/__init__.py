"""

BLE bridge

Drives an out-of-process BLE server on behalf of a host BLE API. Commands and results travel over the server's
standard input and output as length-prefixed JSON frames.

- Conduit: abstraction of a bi-directional channel. Combines 2 streams for reading and writing.
  ProcessConduit provides the streams of a spawned process.
- Connector: binds a conduit to an endpoint. ProcessConnector starts the BLE server.
- Framing: each message is a 4 byte little-endian length followed by UTF-8 JSON.
  FrameDecoder accepts bytes in chunks of any size.
- RequestCorrelator: tags each request with an id, and completes the future for the request when the response
  with the same id arrives. Responses may arrive in any order. When the link closes, every pending request fails.
- DeviceHandleTable: the server identifies connected devices by a handle it assigns on connect.
- SubscriptionRegistry: value notifications from the server carry a subscription id, which is mapped back to the
  characteristic that was subscribed.
- BleBridge: the command methods and the router for inbound messages. Results are fired as events
  (see blebridge.events) and returned as futures.


## Threading

Commands are sent on the caller's thread, and return a future immediately.
Messages from the server are read on a background thread (AsyncLoop), which completes futures and fires events.
A handler may send new commands while an event is being fired.

"""
