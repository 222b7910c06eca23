"""The SUBSCRIBE packet, sent by a client to create subscriptions."""

from __future__ import annotations

from .header import Header
from .types import (
    MessageError,
    MessageType,
    QoS,
    next_packet_id,
    read_lp_bytes,
    valid_qos,
    write_lp_bytes,
)


class SubscribeMessage(Header):
    """A SUBSCRIBE packet: a packet id and a list of topic filters with QoS."""

    _TYPE = MessageType.SUBSCRIBE

    def __init__(self) -> None:
        super().__init__()
        self._topics: list[bytes] = []
        self._qos: list[int] = []

    def __str__(self) -> str:
        text = f"{super().__str__()}, Packet ID={self.packet_id}"
        for index, (topic, qos) in enumerate(zip(self._topics, self._qos)):
            name = topic.decode("utf-8", "backslashreplace")
            text += f', Topic[{index}]="{name}"/{qos}'
        return text

    @property
    def topics(self) -> list[bytes]:
        """The topic filters in the order they were added."""
        return list(self._topics)

    @property
    def qos(self) -> list[int]:
        """The requested QoS levels, parallel to topics."""
        return list(self._qos)

    def add_topic(self, topic: bytes, qos: int) -> None:
        """Add a topic filter, or update its QoS if it is already present."""
        if not valid_qos(qos):
            raise MessageError(f"subscribe/add_topic: invalid QoS {qos}")
        topic = bytes(topic)
        try:
            index = self._topics.index(topic)
        except ValueError:
            self._topics.append(topic)
            self._qos.append(qos)
        else:
            self._qos[index] = qos
        self._dirty = True

    def remove_topic(self, topic: bytes) -> None:
        """Remove a topic filter; a topic that is not present is ignored."""
        try:
            index = self._topics.index(bytes(topic))
        except ValueError:
            pass
        else:
            del self._topics[index]
            del self._qos[index]
        self._dirty = True

    def topic_exists(self, topic: bytes) -> bool:
        """Return whether the topic filter is in the message."""
        return bytes(topic) in self._topics

    def topic_qos(self, topic: bytes) -> int:
        """Return the QoS requested for topic, or QoS.FAILURE if it is absent."""
        try:
            return self._qos[self._topics.index(bytes(topic))]
        except ValueError:
            return QoS.FAILURE

    def _body_length(self) -> int:
        return 2 + sum(2 + len(topic) + 1 for topic in self._topics)

    def encode(self) -> bytes:
        """Return the packet as bytes, assigning a packet id if none is set."""
        if not self._dirty:
            return self._dbuf
        if self._packet_id == 0:
            self.packet_id = next_packet_id() or next_packet_id()
        parts = [self._packet_id.to_bytes(2, "big")]
        for topic, qos in zip(self._topics, self._qos):
            parts.append(write_lp_bytes(topic))
            parts.append(bytes([qos]))
        return self._finish_encode(b"".join(parts))

    def decode(self, src: bytes) -> int:
        """Decode the packet from src and return the number of bytes used."""
        src = bytes(src)
        header_len = self.decode_header(src)
        end = header_len + self._remaining_length
        body = src[:end]
        total = header_len
        if end - total < 2:
            raise MessageError(
                f"subscribe/decode: insufficient buffer size, expecting 2, got {end - total}"
            )
        self._packet_id = int.from_bytes(body[total : total + 2], "big")
        total += 2

        topics: list[bytes] = []
        qos_levels: list[int] = []
        while total < end:
            topic, used = read_lp_bytes(body[total:])
            total += used
            if total >= end:
                raise MessageError(
                    f"subscribe/decode: missing QoS byte for topic {len(topics)}"
                )
            topics.append(topic)
            qos_levels.append(body[total])
            total += 1

        if not topics:
            raise MessageError("subscribe/decode: empty topic list")

        self._topics = topics
        self._qos = qos_levels
        self._mark_decoded(src, total)
        return total