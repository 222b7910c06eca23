"""Core MQTT wire types, constants and length-prefixed field helpers."""

from __future__ import annotations

import itertools
import threading
from enum import IntEnum

MAX_LP_STRING = 65535
MAX_FIXED_HEADER_LENGTH = 5
MAX_REMAINING_LENGTH = 268435455

SUPPORTED_VERSIONS: dict[int, str] = {
    0x3: "MQIsdp",
    0x4: "MQTT",
}


class MessageError(Exception):
    """Raised when a message cannot be encoded, decoded or modified."""


class MessageType(IntEnum):
    """MQTT control packet types (a 4-bit value in the fixed header)."""

    RESERVED = 0
    CONNECT = 1
    CONNACK = 2
    PUBLISH = 3
    PUBACK = 4
    PUBREC = 5
    PUBREL = 6
    PUBCOMP = 7
    SUBSCRIBE = 8
    SUBACK = 9
    UNSUBSCRIBE = 10
    UNSUBACK = 11
    PINGREQ = 12
    PINGRESP = 13
    DISCONNECT = 14
    RESERVED2 = 15

    def __str__(self) -> str:
        return self.name

    def description(self) -> str:
        """Return the description of the packet type from the MQTT spec."""
        return _TYPE_DESCRIPTIONS[self]

    def default_flags(self) -> int:
        """Return the fixed-header flags the spec mandates for this type."""
        return _TYPE_FLAGS.get(self, 0)

    def is_valid(self) -> bool:
        """Return whether the type may appear on the wire."""
        return MessageType.RESERVED < self < MessageType.RESERVED2


_TYPE_DESCRIPTIONS = {
    MessageType.RESERVED: "Reserved",
    MessageType.CONNECT: "Client request to connect to Server",
    MessageType.CONNACK: "Connect acknowledgement",
    MessageType.PUBLISH: "Publish message",
    MessageType.PUBACK: "Publish acknowledgement",
    MessageType.PUBREC: "Publish received (assured delivery part 1)",
    MessageType.PUBREL: "Publish release (assured delivery part 2)",
    MessageType.PUBCOMP: "Publish complete (assured delivery part 3)",
    MessageType.SUBSCRIBE: "Client subscribe request",
    MessageType.SUBACK: "Subscribe acknowledgement",
    MessageType.UNSUBSCRIBE: "Unsubscribe request",
    MessageType.UNSUBACK: "Unsubscribe acknowledgement",
    MessageType.PINGREQ: "PING request",
    MessageType.PINGRESP: "PING response",
    MessageType.DISCONNECT: "Client is disconnecting",
    MessageType.RESERVED2: "Reserved",
}

_TYPE_FLAGS = {
    MessageType.PUBREL: 2,
    MessageType.SUBSCRIBE: 2,
    MessageType.UNSUBSCRIBE: 2,
}


class QoS(IntEnum):
    """Quality of service levels, plus the SUBACK failure marker."""

    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2
    FAILURE = 0x80


class ConnackCode(IntEnum):
    """Return codes carried by a CONNACK packet."""

    CONNECTION_ACCEPTED = 0
    INVALID_PROTOCOL_VERSION = 1
    IDENTIFIER_REJECTED = 2
    SERVER_UNAVAILABLE = 3
    BAD_USERNAME_OR_PASSWORD = 4
    NOT_AUTHORIZED = 5

    def description(self) -> str:
        """Return the long description of the return code."""
        return _CONNACK_DESCRIPTIONS.get(self, "")

    def error_message(self) -> str:
        """Return the short error text for the return code."""
        return _CONNACK_ERRORS.get(self, "Unknown error")

    def is_valid(self) -> bool:
        """Return whether the code is one the protocol defines."""
        return self <= 5


_CONNACK_DESCRIPTIONS = {
    ConnackCode.CONNECTION_ACCEPTED: "Connection accepted",
    ConnackCode.INVALID_PROTOCOL_VERSION: (
        "The Server does not support the level of the MQTT protocol requested by the Client"
    ),
    ConnackCode.IDENTIFIER_REJECTED: (
        "The Client identifier is correct UTF-8 but not allowed by the server"
    ),
    ConnackCode.SERVER_UNAVAILABLE: (
        "The Network Connection has been made but the MQTT service is unavailable"
    ),
    ConnackCode.BAD_USERNAME_OR_PASSWORD: "The data in the user name or password is malformed",
    ConnackCode.NOT_AUTHORIZED: "The Client is not authorized to connect",
}

_CONNACK_ERRORS = {
    ConnackCode.CONNECTION_ACCEPTED: "Connection accepted",
    ConnackCode.INVALID_PROTOCOL_VERSION: "Connection Refused, unacceptable protocol version",
    ConnackCode.IDENTIFIER_REJECTED: "Connection Refused, identifier rejected",
    ConnackCode.SERVER_UNAVAILABLE: "Connection Refused, Server unavailable",
    ConnackCode.BAD_USERNAME_OR_PASSWORD: "Connection Refused, bad user name or password",
    ConnackCode.NOT_AUTHORIZED: "Connection Refused, not authorized",
}


class ConnackError(MessageError):
    """A failure that maps onto a CONNACK return code sent back to the client."""

    def __init__(self, code: ConnackCode | int) -> None:
        self.code = ConnackCode(code)
        super().__init__(self.code.error_message())


def valid_topic(topic: bytes) -> bool:
    """Return whether a topic name is non-empty and free of wildcards."""
    return len(topic) > 0 and b"#" not in topic and b"+" not in topic


def valid_qos(qos: int) -> bool:
    """Return whether qos is 0, 1 or 2."""
    return qos in (QoS.AT_MOST_ONCE, QoS.AT_LEAST_ONCE, QoS.EXACTLY_ONCE)


def valid_version(version: int) -> bool:
    """Return whether the protocol level is supported."""
    return version in SUPPORTED_VERSIONS


def is_connack_error(err: BaseException) -> bool:
    """Return whether err is a refusal that should be answered with a CONNACK."""
    return isinstance(err, ConnackError) and err.code != ConnackCode.CONNECTION_ACCEPTED


def read_lp_bytes(buf: bytes) -> tuple[bytes, int]:
    """Read a 2-byte big-endian length-prefixed field.

    Returns the field contents and the number of bytes consumed.
    """
    if len(buf) < 2:
        raise MessageError(
            f"read_lp_bytes: insufficient buffer size, expecting 2, got {len(buf)}"
        )
    length = int.from_bytes(buf[:2], "big")
    total = 2 + length
    if len(buf) < total:
        raise MessageError(
            f"read_lp_bytes: insufficient buffer size, expecting {total}, got {len(buf)}"
        )
    return bytes(buf[2:total]), total


def write_lp_bytes(data: bytes) -> bytes:
    """Return data prefixed with its 2-byte big-endian length."""
    if len(data) > MAX_LP_STRING:
        raise MessageError(
            f"write_lp_bytes: length ({len(data)}) greater than {MAX_LP_STRING} bytes"
        )
    return len(data).to_bytes(2, "big") + bytes(data)


_packet_counter = itertools.count(1)
_packet_lock = threading.Lock()


def next_packet_id() -> int:
    """Return the next packet identifier from a process-wide 16-bit counter."""
    with _packet_lock:
        return next(_packet_counter) & 0xFFFF