import pytest

from mqttwire.header import Header
from mqttwire.types import MAX_REMAINING_LENGTH, MessageError, MessageType


def _pubrel_header() -> Header:
    header = Header()
    header.set_type(MessageType.PUBREL)
    return header


def test_header_fields():
    header = Header()
    header.set_remaining_length(33)
    assert header.remaining_length == 33

    with pytest.raises(MessageError):
        header.set_remaining_length(268435456)
    with pytest.raises(MessageError):
        header.set_remaining_length(-1)
    with pytest.raises(MessageError):
        header.set_type(MessageType.RESERVED)

    header.set_type(MessageType.PUBREL)
    assert header.message_type == MessageType.PUBREL
    assert header.name == "PUBREL"
    assert header.flags == 2


@pytest.mark.parametrize(
    "data",
    [
        bytes([0x6F, 193, 2]),
        bytes([0x62, 0xFF, 0xFF, 0xFF, 0xFF]),
        bytes([0x62, 0xFF]),
    ],
    ids=["type-mismatch", "length-too-big", "truncated-length"],
)
def test_decode_bare_header_fails(data):
    with pytest.raises(MessageError):
        Header().decode_header(data)


@pytest.mark.parametrize("data", [b"", bytes([0x60, 0])], ids=["empty", "wrong-flags"])
def test_decode_pubrel_header_fails(data):
    with pytest.raises(MessageError):
        _pubrel_header().decode_header(data)


@pytest.mark.parametrize(
    "data, length",
    [
        (bytes([0x62, 0xFF, 0xFF, 0xFF, 0x7F]), MAX_REMAINING_LENGTH),
        (bytes([0x62, 0xFF, 0x7F]), 16383),
    ],
)
def test_decode_length_beyond_buffer(data, length):
    header = _pubrel_header()
    with pytest.raises(MessageError):
        header.decode_header(data)
    assert header.remaining_length == length


def test_decode_success_returns_header_size():
    header = _pubrel_header()
    assert header.decode_header(bytes([0x62, 2, 0, 7])) == 2
    assert header.remaining_length == 2


@pytest.mark.parametrize(
    "length, expected",
    [
        (321, bytes([0x62, 193, 2])),
        (MAX_REMAINING_LENGTH, bytes([0x62, 0xFF, 0xFF, 0xFF, 0x7F])),
    ],
)
def test_encode(length, expected):
    header = _pubrel_header()
    header.set_remaining_length(length)
    assert header.encode_header() == expected
    assert header.header_length() == len(expected)


def test_encode_length_out_of_bound():
    header = _pubrel_header()
    header._remaining_length = 268435456
    with pytest.raises(MessageError):
        header.encode_header()


def test_encode_reserved_type_fails():
    header = Header()
    header._type_flags = int(MessageType.RESERVED2) << 4
    with pytest.raises(MessageError):
        header.encode_header()


@pytest.mark.parametrize(
    "length, size",
    [(0, 2), (127, 2), (128, 3), (16383, 3), (16384, 4), (2097151, 4), (2097152, 5)],
)
def test_header_length_thresholds(length, size):
    header = _pubrel_header()
    header.set_remaining_length(length)
    assert header.header_length() == size
    assert len(header.encode_header()) == size


def test_packet_id_zero_is_ignored():
    header = Header()
    header.packet_id = 100
    header.packet_id = 0
    assert header.packet_id == 100


def test_packet_id_out_of_range():
    with pytest.raises(MessageError):
        Header().packet_id = 0x10000


def test_str_representation():
    header = _pubrel_header()
    header.set_remaining_length(2)
    assert str(header) == 'Type="PUBREL", Flags=00000010, Remaining Length=2'