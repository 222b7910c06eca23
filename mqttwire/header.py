"""The MQTT fixed header shared by every control packet."""

from __future__ import annotations

from .types import MAX_REMAINING_LENGTH, MessageError, MessageType, valid_qos


def _length_size(length: int) -> int:
    """Return how many bytes the variable-length encoding of length takes."""
    if length <= 127:
        return 1
    if length <= 16383:
        return 2
    if length <= 2097151:
        return 3
    return 4


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _decode_varint(src: bytes, offset: int) -> tuple[int, int]:
    """Decode a remaining-length field at offset; return (value, bytes used)."""
    value = 0
    for index, byte in enumerate(src[offset : offset + 4]):
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return value, index + 1
    if len(src) - offset < 4:
        raise MessageError("header/decode: remaining length field is incomplete")
    raise MessageError("header/decode: remaining length field is longer than 4 bytes")


class Header:
    """Fixed header: packet type, flags and remaining length, plus packet id."""

    _TYPE: MessageType | None = None

    def __init__(self) -> None:
        self._type_flags = 0
        self._remaining_length = 0
        self._packet_id = 0
        self._dbuf = b""
        self._dirty = True
        if self._TYPE is not None:
            self.set_type(self._TYPE)

    def __str__(self) -> str:
        return (
            f'Type="{self.name}", Flags={self.flags:08b}, '
            f"Remaining Length={self.remaining_length}"
        )

    def __len__(self) -> int:
        if not self._dirty:
            return len(self._dbuf)
        body = self._body_length()
        return 1 + _length_size(body) + body

    @property
    def message_type(self) -> MessageType:
        """The packet type held in the high nibble of the first byte."""
        return MessageType(self._type_flags >> 4)

    @property
    def name(self) -> str:
        """The name of the packet type, such as "PUBLISH"."""
        return self.message_type.name

    @property
    def description(self) -> str:
        """The spec description of the packet type."""
        return self.message_type.description()

    @property
    def flags(self) -> int:
        """The low nibble of the first byte."""
        return self._type_flags & 0x0F

    @property
    def remaining_length(self) -> int:
        """The length of the packet after the fixed header."""
        return self._remaining_length

    @property
    def packet_id(self) -> int:
        """The 16-bit packet identifier, or 0 when none is set."""
        return self._packet_id

    @packet_id.setter
    def packet_id(self, value: int) -> None:
        if value == 0:
            return
        if not 0 < value <= 0xFFFF:
            raise MessageError(f"header/packet_id: packet id ({value}) out of range")
        self._packet_id = value
        self._dirty = True

    def set_type(self, mtype: MessageType | int) -> None:
        """Set the packet type together with its default flags."""
        try:
            mtype = MessageType(mtype)
        except ValueError:
            raise MessageError(
                f"header/set_type: invalid control packet type {mtype}"
            ) from None
        if not mtype.is_valid():
            raise MessageError(f"header/set_type: invalid control packet type {int(mtype)}")
        self._type_flags = (int(mtype) << 4) | (mtype.default_flags() & 0x0F)
        self._dirty = True

    def set_remaining_length(self, length: int) -> None:
        """Set the remaining length, which must be within 0..268435455."""
        if not 0 <= length <= MAX_REMAINING_LENGTH:
            raise MessageError(
                f"header/set_remaining_length: remaining length ({length}) out of bound "
                f"(max {MAX_REMAINING_LENGTH}, min 0)"
            )
        self._remaining_length = length
        self._dirty = True

    def header_length(self) -> int:
        """Return the encoded size of the fixed header."""
        return 1 + _length_size(self._remaining_length)

    def encode_header(self) -> bytes:
        """Return the encoded fixed header."""
        if not 0 <= self._remaining_length <= MAX_REMAINING_LENGTH:
            raise MessageError(
                f"header/encode: remaining length ({self._remaining_length}) out of bound "
                f"(max {MAX_REMAINING_LENGTH}, min 0)"
            )
        if not self.message_type.is_valid():
            raise MessageError(f"header/encode: invalid message type {int(self.message_type)}")
        return bytes([self._type_flags]) + _encode_varint(self._remaining_length)

    def decode_header(self, src: bytes) -> int:
        """Decode the fixed header from src and return the bytes it used.

        The packet type in src must match the type already set on this header.
        """
        if not src:
            raise MessageError("header/decode: empty buffer")
        expected = self.message_type
        first = src[0]
        actual = MessageType(first >> 4)
        if not actual.is_valid():
            raise MessageError(f"header/decode: invalid message type {int(actual)}")
        if actual != expected:
            raise MessageError(
                f"header/decode: invalid message type {int(actual)}, "
                f"expecting {int(expected)}"
            )
        self._type_flags = first
        flags = first & 0x0F
        if actual != MessageType.PUBLISH and flags != actual.default_flags():
            raise MessageError(
                f"header/decode: invalid message ({int(actual)}) flags, "
                f"expecting {actual.default_flags()}, got {flags}"
            )
        if actual == MessageType.PUBLISH and not valid_qos((flags >> 1) & 0x3):
            raise MessageError(
                f"header/decode: invalid QoS ({(flags >> 1) & 0x3}) for PUBLISH message"
            )

        total = 1
        length, used = _decode_varint(src, total)
        total += used
        self._remaining_length = length

        if length > MAX_REMAINING_LENGTH:
            raise MessageError(
                f"header/decode: remaining length ({length}) out of bound "
                f"(max {MAX_REMAINING_LENGTH}, min 0)"
            )
        if length > len(src) - total:
            raise MessageError(
                f"header/decode: remaining length ({length}) is greater than "
                f"remaining buffer ({len(src) - total})"
            )
        return total

    def _body_length(self) -> int:
        return self._remaining_length

    def _finish_encode(self, body: bytes) -> bytes:
        self.set_remaining_length(len(body))
        return self.encode_header() + body

    def _mark_decoded(self, src: bytes, total: int) -> None:
        self._dbuf = bytes(src[:total])
        self._dirty = False