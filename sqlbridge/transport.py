"""
Framing, handshake and message loop between the host and the bridge.

The host writes a connection-info handshake followed by one frame per
message, each ``{"event": ..., "data": ..., "id": ...}`` with ``id``
optional. The bridge answers every message with exactly one reply frame, in
the order the messages arrived.
"""

import collections
import json
import logging

import msgpack

from .errors import BridgeError, ProtocolError, EncodingError, HandshakeError


_log = logging.getLogger(__name__)


class JsonLinesCodec(object):
    name = "json"

    def frames(self, stream):
        for line in stream:
            if line.strip():
                yield line

    def decode(self, frame):
        try:
            return json.loads(frame)
        except (ValueError, RecursionError) as error:
            raise ProtocolError("malformed message", error) from error

    def encode(self, value):
        return (json.dumps(value, allow_nan=False) + "\n").encode("utf-8")


class MsgpackCodec(object):
    name = "msgpack"

    def frames(self, stream):
        return msgpack.Unpacker(stream, read_size=1, raw=False)

    def decode(self, frame):
        return frame

    def encode(self, value):
        return msgpack.packb(value, use_bin_type=True)


_codecs = {
    "json": JsonLinesCodec,
    "msgpack": MsgpackCodec,
}


def get_codec(name):
    if name not in _codecs:
        raise ValueError("unknown codec: {0}".format(name))
    return _codecs[name]()


def codec_names():
    return sorted(_codecs)


ConnectionInfo = collections.namedtuple(
    "ConnectionInfo",
    ["port", "token", "connect_token", "extension_id", "raw"],
)


def read_connection_info(frames, codec):
    try:
        frame = next(frames)
    except StopIteration:
        raise HandshakeError("missing connection info")

    try:
        info = codec.decode(frame)
    except ProtocolError as error:
        raise HandshakeError("cannot read connection info", error) from error

    if not isinstance(info, dict):
        raise HandshakeError("connection info is not an object")

    return ConnectionInfo(
        port=info.get("nlPort"),
        token=info.get("nlToken"),
        connect_token=info.get("nlConnectToken"),
        extension_id=info.get("nlExtensionId"),
        raw=info,
    )


class MessageLoop(object):
    def __init__(self, codec, frames, output):
        self._codec = codec
        self._frames = frames
        self._output = output

    def run(self, handler):
        for frame in self._frames:
            reply = self._handle_frame(frame, handler)
            self._write(reply)

    def _handle_frame(self, frame, handler):
        message = {}
        try:
            message = self._codec.decode(frame)
            event, data = _unpack_message(message)
            _log.debug("Received %s event", event)
            result = handler(event, data)
        except BridgeError as error:
            _log.warning("Message failed: %s", error)
            return _reply(message, result=None, error=error)
        else:
            return _reply(message, result=result, error=None)

    def _write(self, reply):
        try:
            encoded = self._codec.encode(reply)
        except (TypeError, ValueError, OverflowError) as cause:
            error = EncodingError("cannot encode result", cause)
            _log.warning("Message failed: %s", error)
            encoded = self._codec.encode(dict(reply, result=None, error=_describe(error)))

        self._output.write(encoded)
        self._output.flush()


def run_loop(handler, input_stream, output_stream, codec):
    frames = iter(codec.frames(input_stream))
    connection_info = read_connection_info(frames, codec)
    _log.info("Connected to host (extension id: %s)", connection_info.extension_id)
    MessageLoop(codec, frames, output_stream).run(handler)
    _log.info("Input closed, leaving message loop")
    return connection_info


def _unpack_message(message):
    if not isinstance(message, dict):
        raise ProtocolError("message not an object")
    event = message.get("event")
    if not isinstance(event, str):
        raise ProtocolError("message has no event name")
    return event, message.get("data")


def _reply(message, result, error):
    reply = {
        "event": message.get("event") if isinstance(message, dict) else None,
        "result": result,
        "error": None if error is None else _describe(error),
    }
    if isinstance(message, dict) and "id" in message:
        reply["id"] = message["id"]
    return reply


def _describe(error):
    return {"kind": error.kind, "message": str(error)}
