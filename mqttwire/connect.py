"""The CONNECT packet, the first packet a client sends to a server."""

from __future__ import annotations

import re

from .header import Header
from .types import (
    SUPPORTED_VERSIONS,
    ConnackCode,
    ConnackError,
    MessageError,
    MessageType,
    QoS,
    read_lp_bytes,
    valid_qos,
    write_lp_bytes,
)

_CLIENT_ID_PATTERN = re.compile(rb"[0-9a-zA-Z _]*")

_CLEAN_SESSION = 0x02
_WILL_FLAG = 0x04
_WILL_QOS_MASK = 0x18
_WILL_RETAIN = 0x20
_PASSWORD_FLAG = 0x40
_USERNAME_FLAG = 0x80


def _quote(data: bytes) -> str:
    return '"' + data.decode("utf-8", "backslashreplace") + '"'


class ConnectMessage(Header):
    """A CONNECT packet with protocol level, flags, keep-alive and payload fields."""

    _TYPE = MessageType.CONNECT

    def __init__(self) -> None:
        super().__init__()
        self._connect_flags = 0
        self._version = 0
        self._keep_alive = 0
        self._protocol_name = b""
        self._client_id = b""
        self._will_topic = b""
        self._will_message = b""
        self._username = b""
        self._password = b""

    def __str__(self) -> str:
        return (
            f"{super().__str__()}, Connect Flags={self._connect_flags:08b}, "
            f"Version={self._version}, KeepAlive={self._keep_alive}, "
            f"Client ID={_quote(self._client_id)}, "
            f"Will Topic={_quote(self._will_topic)}, "
            f"Will Message={_quote(self._will_message)}, "
            f"Username={_quote(self._username)}, "
            f"Password={_quote(self._password)}"
        )

    # -- flag helpers -------------------------------------------------------

    def _set_bit(self, mask: int, value: bool) -> None:
        if value:
            self._connect_flags |= mask
        else:
            self._connect_flags &= ~mask & 0xFF
        self._dirty = True

    @property
    def connect_flags(self) -> int:
        """The raw connect flags byte."""
        return self._connect_flags

    @property
    def version(self) -> int:
        """The protocol level: 3 for MQTT 3.1, 4 for MQTT 3.1.1."""
        return self._version

    def set_version(self, version: int) -> None:
        """Set the protocol level; only supported levels are accepted."""
        if version not in SUPPORTED_VERSIONS:
            raise MessageError(f"connect/set_version: invalid version number {version}")
        self._version = version
        self._dirty = True

    @property
    def clean_session(self) -> bool:
        """Whether the session state is discarded at connect and disconnect."""
        return bool(self._connect_flags & _CLEAN_SESSION)

    @clean_session.setter
    def clean_session(self, value: bool) -> None:
        self._set_bit(_CLEAN_SESSION, value)

    @property
    def will_flag(self) -> bool:
        """Whether a will message is to be stored on the server."""
        return bool(self._connect_flags & _WILL_FLAG)

    @will_flag.setter
    def will_flag(self, value: bool) -> None:
        self._set_bit(_WILL_FLAG, value)

    @property
    def will_qos(self) -> int:
        """The QoS level used when publishing the will message."""
        return (self._connect_flags >> 3) & 0x3

    def set_will_qos(self, qos: int) -> None:
        """Set the will QoS; it must be 0, 1 or 2."""
        if not valid_qos(qos):
            raise MessageError(f"connect/set_will_qos: invalid QoS level {qos}")
        self._connect_flags = (self._connect_flags & ~_WILL_QOS_MASK & 0xFF) | (qos << 3)
        self._dirty = True

    @property
    def will_retain(self) -> bool:
        """Whether the will message is retained when published."""
        return bool(self._connect_flags & _WILL_RETAIN)

    @will_retain.setter
    def will_retain(self, value: bool) -> None:
        self._set_bit(_WILL_RETAIN, value)

    @property
    def username_flag(self) -> bool:
        """Whether a user name is present in the payload."""
        return bool(self._connect_flags & _USERNAME_FLAG)

    @username_flag.setter
    def username_flag(self, value: bool) -> None:
        self._set_bit(_USERNAME_FLAG, value)

    @property
    def password_flag(self) -> bool:
        """Whether a password is present in the payload."""
        return bool(self._connect_flags & _PASSWORD_FLAG)

    @password_flag.setter
    def password_flag(self, value: bool) -> None:
        self._set_bit(_PASSWORD_FLAG, value)

    # -- fields -------------------------------------------------------------

    @property
    def keep_alive(self) -> int:
        """The keep-alive interval in seconds."""
        return self._keep_alive

    @keep_alive.setter
    def keep_alive(self, value: int) -> None:
        if not 0 <= value <= 0xFFFF:
            raise MessageError(f"connect/keep_alive: value ({value}) out of range")
        self._keep_alive = value
        self._dirty = True

    @property
    def client_id(self) -> bytes:
        """The identifier of the client."""
        return self._client_id

    def set_client_id(self, client_id: bytes) -> None:
        """Set the client identifier, rejecting characters the server disallows."""
        client_id = bytes(client_id)
        if client_id and not self._valid_client_id(client_id):
            raise ConnackError(ConnackCode.IDENTIFIER_REJECTED)
        self._client_id = client_id
        self._dirty = True

    @property
    def will_topic(self) -> bytes:
        """The topic the will message is published to."""
        return self._will_topic

    @will_topic.setter
    def will_topic(self, value: bytes) -> None:
        self._will_topic = bytes(value)
        if value:
            self.will_flag = True
        elif not self._will_message:
            self.will_flag = False
        self._dirty = True

    @property
    def will_message(self) -> bytes:
        """The will message published on abnormal disconnection."""
        return self._will_message

    @will_message.setter
    def will_message(self, value: bytes) -> None:
        self._will_message = bytes(value)
        if value:
            self.will_flag = True
        elif not self._will_topic:
            self.will_flag = False
        self._dirty = True

    @property
    def username(self) -> bytes:
        """The user name used for authentication."""
        return self._username

    @username.setter
    def username(self, value: bytes) -> None:
        self._username = bytes(value)
        self.username_flag = bool(value)

    @property
    def password(self) -> bytes:
        """The password used for authentication."""
        return self._password

    @password.setter
    def password(self, value: bytes) -> None:
        self._password = bytes(value)
        self.password_flag = bool(value)

    # -- wire format --------------------------------------------------------

    def _valid_client_id(self, client_id: bytes) -> bool:
        if self._version == 0x3:
            return True
        return _CLIENT_ID_PATTERN.fullmatch(client_id) is not None

    def _body_length(self) -> int:
        name = SUPPORTED_VERSIONS.get(self._version)
        if name is None:
            return 0
        total = 2 + len(name) + 1 + 1 + 2
        total += 2 + len(self._client_id)
        if self.will_flag:
            total += 2 + len(self._will_topic) + 2 + len(self._will_message)
        if self.username_flag and self._username:
            total += 2 + len(self._username)
        if self.password_flag and self._password:
            total += 2 + len(self._password)
        return total

    def encode(self) -> bytes:
        """Return the packet as bytes."""
        if not self._dirty:
            return self._dbuf
        name = SUPPORTED_VERSIONS.get(self._version)
        if name is None:
            raise ConnackError(ConnackCode.INVALID_PROTOCOL_VERSION)

        parts = [
            write_lp_bytes(name.encode("ascii")),
            bytes([self._version, self._connect_flags]),
            self._keep_alive.to_bytes(2, "big"),
            write_lp_bytes(self._client_id),
        ]
        if self.will_flag:
            parts.append(write_lp_bytes(self._will_topic))
            parts.append(write_lp_bytes(self._will_message))
        if self.username_flag and self._username:
            parts.append(write_lp_bytes(self._username))
        if self.password_flag and self._password:
            parts.append(write_lp_bytes(self._password))
        return self._finish_encode(b"".join(parts))

    def decode(self, src: bytes) -> int:
        """Decode the packet from src and return the number of bytes used.

        Refusals that the server should answer with a CONNACK raise ConnackError.
        """
        src = bytes(src)
        total = self.decode_header(src)

        self._protocol_name, used = read_lp_bytes(src[total:])
        total += used

        if len(src) <= total:
            raise MessageError(
                f"connect/decode: index out of range [{total}] with length {len(src)}"
            )
        self._version = src[total]
        total += 1

        name = SUPPORTED_VERSIONS.get(self._version)
        if name is None or name.encode("ascii") != self._protocol_name:
            raise ConnackError(ConnackCode.INVALID_PROTOCOL_VERSION)

        if len(src) <= total:
            raise MessageError(
                f"connect/decode: index out of range [{total}] with length {len(src)}"
            )
        self._connect_flags = src[total]
        total += 1

        if self._connect_flags & 0x1:
            raise MessageError("connect/decode: connect flags reserved bit 0 is not 0")
        if self.will_qos > QoS.EXACTLY_ONCE:
            raise MessageError(
                f"connect/decode: invalid QoS level ({self.will_qos}) for {self.name} message"
            )
        if not self.will_flag and (self.will_retain or self.will_qos != QoS.AT_MOST_ONCE):
            raise MessageError(
                "connect/decode: protocol violation: if the will flag is 0 the will QoS "
                "and will retain fields must be 0"
            )
        if self.username_flag and not self.password_flag:
            raise MessageError(
                "connect/decode: username flag is set but password flag is not set"
            )

        if len(src) - total < 2:
            raise MessageError(
                f"connect/decode: insufficient buffer size, expecting 2, "
                f"got {len(src) - total}"
            )
        self._keep_alive = int.from_bytes(src[total : total + 2], "big")
        total += 2

        self._client_id, used = read_lp_bytes(src[total:])
        total += used

        if not self._client_id and not self.clean_session:
            raise ConnackError(ConnackCode.IDENTIFIER_REJECTED)
        if self._client_id and not self._valid_client_id(self._client_id):
            raise ConnackError(ConnackCode.IDENTIFIER_REJECTED)

        if self.will_flag:
            self._will_topic, used = read_lp_bytes(src[total:])
            total += used
            self._will_message, used = read_lp_bytes(src[total:])
            total += used

        if self.username_flag and len(src) > total:
            self._username, used = read_lp_bytes(src[total:])
            total += used

        if self.password_flag and len(src) > total:
            self._password, used = read_lp_bytes(src[total:])
            total += used

        self._mark_decoded(src, total)
        return total