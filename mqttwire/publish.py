"""The PUBLISH packet, which carries an application message."""

from __future__ import annotations

from .header import Header
from .types import (
    MessageError,
    MessageType,
    next_packet_id,
    read_lp_bytes,
    valid_qos,
    valid_topic,
    write_lp_bytes,
)

_DUP = 0x08
_QOS_MASK = 0x06
_RETAIN = 0x01


class PublishMessage(Header):
    """A PUBLISH packet with topic, optional packet id and payload."""

    _TYPE = MessageType.PUBLISH

    def __init__(self) -> None:
        super().__init__()
        self._topic = b""
        self._payload = b""

    def __str__(self) -> str:
        topic = self._topic.decode("utf-8", "backslashreplace")
        payload = " ".join(str(b) for b in self._payload)
        return (
            f'{super().__str__()}, Topic="{topic}", Packet ID={self.packet_id}, '
            f"QoS={self.qos}, Retained={str(self.retain).lower()}, "
            f"Dup={str(self.dup).lower()}, Payload=[{payload}]"
        )

    def _set_flag(self, mask: int, value: bool) -> None:
        if value:
            self._type_flags |= mask
        else:
            self._type_flags &= ~mask & 0xFF
        self._dirty = True

    @property
    def dup(self) -> bool:
        """Whether this may be a re-delivery of an earlier attempt."""
        return bool(self.flags & _DUP)

    @dup.setter
    def dup(self, value: bool) -> None:
        self._set_flag(_DUP, value)

    @property
    def retain(self) -> bool:
        """Whether the server should retain the message for future subscribers."""
        return bool(self.flags & _RETAIN)

    @retain.setter
    def retain(self, value: bool) -> None:
        self._set_flag(_RETAIN, value)

    @property
    def qos(self) -> int:
        """The delivery assurance level: 0, 1 or 2."""
        return (self.flags >> 1) & 0x3

    def set_qos(self, qos: int) -> None:
        """Set the QoS level; it must be 0, 1 or 2."""
        if not valid_qos(qos):
            raise MessageError(f"publish/set_qos: invalid QoS {qos}")
        self._type_flags = (self._type_flags & ~_QOS_MASK & 0xFF) | (qos << 1)
        self._dirty = True

    @property
    def topic(self) -> bytes:
        """The topic name the payload is published to."""
        return self._topic

    def set_topic(self, topic: bytes) -> None:
        """Set the topic name; it must be non-empty and free of wildcards."""
        topic = bytes(topic)
        if not valid_topic(topic):
            raise MessageError(
                f"publish/set_topic: invalid topic name ({topic!r}), must not be empty "
                "or contain wildcard characters"
            )
        self._topic = topic
        self._dirty = True

    @property
    def payload(self) -> bytes:
        """The application message."""
        return self._payload

    @payload.setter
    def payload(self, value: bytes) -> None:
        self._payload = bytes(value)
        self._dirty = True

    def _body_length(self) -> int:
        total = 2 + len(self._topic) + len(self._payload)
        if self.qos:
            total += 2
        return total

    def encode(self) -> bytes:
        """Return the packet as bytes, assigning a packet id when QoS needs one."""
        if not self._dirty:
            return self._dbuf
        if not self._topic:
            raise MessageError("publish/encode: topic name is empty")
        if not self._payload:
            raise MessageError("publish/encode: payload is empty")

        parts = [write_lp_bytes(self._topic)]
        if self.qos:
            if self._packet_id == 0:
                self.packet_id = next_packet_id() or next_packet_id()
            parts.append(self._packet_id.to_bytes(2, "big"))
        parts.append(self._payload)
        return self._finish_encode(b"".join(parts))

    def decode(self, src: bytes) -> int:
        """Decode the packet from src and return the number of bytes used."""
        src = bytes(src)
        header_len = self.decode_header(src)
        total = header_len

        self._topic, used = read_lp_bytes(src[total:])
        total += used
        if not valid_topic(self._topic):
            raise MessageError(
                f"publish/decode: invalid topic name ({self._topic!r}), must not be "
                "empty or contain wildcard characters"
            )

        if self.qos:
            if len(src) - total < 2:
                raise MessageError(
                    f"publish/decode: insufficient buffer size, expecting 2, "
                    f"got {len(src) - total}"
                )
            self._packet_id = int.from_bytes(src[total : total + 2], "big")
            total += 2

        remaining = self._remaining_length - (total - header_len)
        if remaining < 0:
            raise MessageError(
                f"publish/decode: remaining length ({self._remaining_length}) is "
                "shorter than the variable header"
            )
        self._payload = src[total : total + remaining]
        total += len(self._payload)

        self._mark_decoded(src, total)
        return total