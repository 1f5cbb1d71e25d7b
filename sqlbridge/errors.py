class BridgeError(Exception):
    kind = "bridge"

    def __init__(self, message, cause=None):
        if cause is not None:
            message = "{0}: {1}".format(message, cause)
        super(BridgeError, self).__init__(message)
        self.message = message
        self.cause = cause


class ShapeError(BridgeError):
    kind = "shape"


class FieldTypeError(BridgeError):
    kind = "type"

    def __init__(self, field, value_kind):
        super(FieldTypeError, self).__init__(
            "field '{0}' has the wrong type: got {1}".format(field, value_kind)
        )
        self.field = field


class ExecutionError(BridgeError):
    kind = "execution"


class ColumnError(BridgeError):
    kind = "column"


class ScanError(BridgeError):
    kind = "scan"


class UnsupportedValueError(BridgeError):
    kind = "value"


class ProtocolError(BridgeError):
    kind = "protocol"


class EncodingError(BridgeError):
    kind = "encoding"


class HandshakeError(BridgeError):
    kind = "handshake"
