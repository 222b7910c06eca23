"""The SUBACK packet, which confirms a SUBSCRIBE and reports granted QoS levels."""

from __future__ import annotations

from collections.abc import Iterable

from .header import Header
from .types import MessageError, MessageType, QoS

_VALID_CODES = frozenset(
    (QoS.AT_MOST_ONCE, QoS.AT_LEAST_ONCE, QoS.EXACTLY_ONCE, QoS.FAILURE)
)


class SubackMessage(Header):
    """A SUBACK packet: a packet id and one return code per subscription."""

    _TYPE = MessageType.SUBACK

    def __init__(self) -> None:
        super().__init__()
        self._return_codes = bytearray()

    def __str__(self) -> str:
        codes = " ".join(str(code) for code in self._return_codes)
        return f"{super().__str__()}, Packet ID={self.packet_id}, Return Codes=[{codes}]"

    @property
    def return_codes(self) -> bytes:
        """The QoS levels granted for each requested subscription, in order."""
        return bytes(self._return_codes)

    def add_return_codes(self, codes: Iterable[int]) -> None:
        """Append return codes; each must be 0, 1, 2 or 0x80."""
        for code in codes:
            if code not in _VALID_CODES:
                raise MessageError(
                    f"suback/add_return_codes: invalid return code {code}, "
                    "must be 0, 1, 2 or 0x80"
                )
            self._return_codes.append(code)
        self._dirty = True

    def add_return_code(self, code: int) -> None:
        """Append a single return code."""
        self.add_return_codes([code])

    def _body_length(self) -> int:
        return 2 + len(self._return_codes)

    def encode(self) -> bytes:
        """Return the packet as bytes."""
        if not self._dirty:
            return self._dbuf
        for index, code in enumerate(self._return_codes):
            if code not in _VALID_CODES:
                raise MessageError(
                    f"suback/encode: invalid return code {code} for topic {index}"
                )
        body = self._packet_id.to_bytes(2, "big") + bytes(self._return_codes)
        return self._finish_encode(body)

    def decode(self, src: bytes) -> int:
        """Decode the packet from src and return the number of bytes used."""
        src = bytes(src)
        header_len = self.decode_header(src)
        total = header_len
        if len(src) - total < 2 or self._remaining_length < 2:
            raise MessageError(
                f"suback/decode: insufficient buffer size, expecting 2, "
                f"got {min(len(src) - total, self._remaining_length)}"
            )
        self._packet_id = int.from_bytes(src[total : total + 2], "big")
        total += 2

        count = self._remaining_length - (total - header_len)
        codes = src[total : total + count]
        total += len(codes)
        for index, code in enumerate(codes):
            if code not in _VALID_CODES:
                raise MessageError(
                    f"suback/decode: invalid return code {code} for topic {index}"
                )
        self._return_codes = bytearray(codes)

        self._mark_decoded(src, total)
        return total