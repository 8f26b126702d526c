"""
Length-prefixed JSON framing used on the link to the BLE server process.

Each frame is a 4 byte unsigned little-endian length followed by that many bytes of UTF-8 encoded JSON.
The JSON value of a frame is always an object.
"""
import json
import struct

header = struct.Struct('<I')

max_frame_length = 0xFFFFFFFF


class ProtocolError(IOError):
    """
    Raised when the data received from the link does not follow the protocol. The link cannot be recovered.
    """


class FramingError(ProtocolError):
    """
    Raised when a frame cannot be encoded or decoded.
    """


def encode_frame(message: dict) -> bytes:
    """
    Encodes a message as a frame.

    >>> encode_frame({'cmd': 'scan'})
    b'\\x0f\\x00\\x00\\x00{"cmd": "scan"}'
    """
    try:
        data = json.dumps(message).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise FramingError("unable to encode message %r" % (message,)) from e
    if len(data) > max_frame_length:
        raise FramingError("message of %d bytes exceeds the maximum frame length" % len(data))
    return header.pack(len(data)) + data


def decode_payload(data: bytes) -> dict:
    """
    Decodes the payload of a single frame.

    >>> decode_payload(b'{"_type": "start"}')
    {'_type': 'start'}
    """
    try:
        message = json.loads(data.decode('utf-8'))
    except ValueError as e:
        raise FramingError("frame payload is not valid JSON: %r" % bytes(data[:64])) from e
    if not isinstance(message, dict):
        raise FramingError("frame payload is not a JSON object: %r" % (message,))
    return message


class FrameDecoder:
    """
    Incrementally decodes frames from bytes fed in chunks of any size.

    Partial frames (including a partial length header) are buffered until the rest of the frame arrives.
    After a frame fails to decode, the stream position is unknown, so the decoder refuses all further input.
    """

    def __init__(self):
        self._buffer = bytearray()
        self._error = None

    @property
    def pending(self):
        """ the number of bytes buffered that do not yet make up a complete frame. """
        return len(self._buffer)

    @property
    def broken(self):
        return self._error is not None

    def feed(self, data):
        """
        Adds data to the buffer and lazily yields each complete message.
        :param data: the bytes read from the stream.
        """
        self._check_broken()
        self._buffer.extend(data)
        return self._messages()

    def _messages(self):
        buffer = self._buffer
        while len(buffer) >= header.size:
            self._check_broken()
            length, = header.unpack_from(buffer)
            end = header.size + length
            if len(buffer) < end:
                break
            payload = bytes(buffer[header.size:end])
            del buffer[:end]
            try:
                message = decode_payload(payload)
            except FramingError as e:
                self._error = e
                raise
            yield message

    def _check_broken(self):
        if self._error is not None:
            raise FramingError("the frame decoder failed on an earlier frame") from self._error


def read_chunk(stream, size):
    """
    Reads up to size bytes from the stream, returning as soon as any data is available.
    Returns an empty bytes object at the end of the stream.
    """
    read1 = getattr(stream, 'read1', None)
    data = read1(size) if read1 is not None else stream.read(size)
    return bytes(data) if data else b''
