"""The UNSUBSCRIBE packet, sent by a client to remove subscriptions."""

from __future__ import annotations

from .header import Header
from .types import (
    MessageError,
    MessageType,
    next_packet_id,
    read_lp_bytes,
    write_lp_bytes,
)


class UnsubscribeMessage(Header):
    """An UNSUBSCRIBE packet: a packet id and a list of topic filters."""

    _TYPE = MessageType.UNSUBSCRIBE

    def __init__(self) -> None:
        super().__init__()
        self._topics: list[bytes] = []

    def __str__(self) -> str:
        text = super().__str__()
        for index, topic in enumerate(self._topics):
            text += f", Topic{index}={topic.decode('utf-8', 'backslashreplace')}"
        return text

    @property
    def topics(self) -> list[bytes]:
        """The topic filters in the order they were added."""
        return list(self._topics)

    def add_topic(self, topic: bytes) -> None:
        """Add a topic filter unless it is already present."""
        topic = bytes(topic)
        if topic in self._topics:
            return
        self._topics.append(topic)
        self._dirty = True

    def remove_topic(self, topic: bytes) -> None:
        """Remove a topic filter; a topic that is not present is ignored."""
        topic = bytes(topic)
        if topic in self._topics:
            self._topics.remove(topic)
        self._dirty = True

    def topic_exists(self, topic: bytes) -> bool:
        """Return whether the topic filter is in the message."""
        return bytes(topic) in self._topics

    def _body_length(self) -> int:
        return 2 + sum(2 + len(topic) for topic in self._topics)

    def encode(self) -> bytes:
        """Return the packet as bytes, assigning a packet id if none is set."""
        if not self._dirty:
            return self._dbuf
        if self._packet_id == 0:
            self.packet_id = next_packet_id() or next_packet_id()
        parts = [self._packet_id.to_bytes(2, "big")]
        parts.extend(write_lp_bytes(topic) for topic in self._topics)
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
                f"unsubscribe/decode: insufficient buffer size, expecting 2, "
                f"got {end - total}"
            )
        self._packet_id = int.from_bytes(body[total : total + 2], "big")
        total += 2

        topics: list[bytes] = []
        while total < end:
            topic, used = read_lp_bytes(body[total:])
            total += used
            topics.append(topic)

        if not topics:
            raise MessageError("unsubscribe/decode: empty topic list")

        self._topics = topics
        self._mark_decoded(src, total)
        return total