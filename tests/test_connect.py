import pytest

from mqttwire.connect import ConnectMessage
from mqttwire.types import (
    ConnackCode,
    ConnackError,
    MessageError,
    MessageType,
    is_connack_error,
)


def _lp(data: bytes) -> bytes:
    return len(data).to_bytes(2, "big") + data


def _packet(remaining: int, flags: int, client_id: bytes) -> bytes:
    return (
        bytes([MessageType.CONNECT << 4, remaining])
        + _lp(b"MQTT")
        + bytes([4, flags, 0, 10])
        + _lp(client_id)
        + _lp(b"will")
        + _lp(b"send me home")
        + _lp(b"surgemq")
        + _lp(b"password")
    )


CONNECT_BYTES = _packet(58, 206, b"surgemq")
NO_CLIENT_ID_BYTES = _packet(51, 204, b"")


def _build_message():
    password = b"password"
    msg = ConnectMessage()
    msg.set_will_qos(1)
    msg.set_version(4)
    msg.clean_session = True
    msg.set_client_id(b"surgemq")
    msg.keep_alive = 10
    msg.will_topic = b"will"
    msg.will_message = b"send me home"
    msg.username = b"surgemq"
    msg.password = password
    return msg


def test_version_field():
    msg = ConnectMessage()
    msg.set_version(0x3)
    assert msg.version == 3
    with pytest.raises(MessageError):
        msg.set_version(0x5)
    assert msg.version == 3


@pytest.mark.parametrize(
    "flag", ["clean_session", "will_flag", "will_retain", "password_flag", "username_flag"]
)
def test_flag_fields(flag):
    msg = ConnectMessage()
    for value in (True, False):
        setattr(msg, flag, value)
        assert getattr(msg, flag) is value


def test_will_qos_field():
    msg = ConnectMessage()
    msg.set_will_qos(1)
    assert msg.will_qos == 1
    with pytest.raises(MessageError):
        msg.set_will_qos(4)
    assert msg.will_qos == 1


def test_client_id_depends_on_version():
    msg = ConnectMessage()
    msg.set_version(0x3)
    for client_id in (b"j0j0jfajf02j0asdjf", b"this is good for v3"):
        msg.set_client_id(client_id)
        assert msg.client_id == client_id

    msg.set_version(0x4)
    with pytest.raises(ConnackError) as info:
        msg.set_client_id(b"this is no good for v4!")
    assert info.value.code == ConnackCode.IDENTIFIER_REJECTED
    assert msg.client_id == b"this is good for v3"


@pytest.mark.parametrize(
    "field, value", [("will_topic", b"willtopic"), ("will_message", b"this is a will message")]
)
def test_will_field_drives_will_flag(field, value):
    msg = ConnectMessage()
    msg.set_version(0x3)
    setattr(msg, field, value)
    assert getattr(msg, field) == value
    assert msg.will_flag is True
    setattr(msg, field, b"")
    assert getattr(msg, field) == b""
    assert msg.will_flag is False


def test_will_flag_kept_while_message_remains():
    msg = ConnectMessage()
    msg.will_topic = b"willtopic"
    msg.will_message = b"this is a will message"
    msg.will_topic = b""
    assert msg.will_flag is True


@pytest.mark.parametrize(
    "field, flag, value",
    [("username", "username_flag", b"myname"), ("password", "password_flag", b"password")],
)
def test_credentials_drive_flags(field, flag, value):
    msg = ConnectMessage()
    setattr(msg, field, value)
    assert getattr(msg, field) == value
    assert getattr(msg, flag) is True
    setattr(msg, field, b"")
    assert getattr(msg, field) == b""
    assert getattr(msg, flag) is False


def test_decode():
    msg = ConnectMessage()
    assert msg.decode(CONNECT_BYTES) == len(CONNECT_BYTES)
    assert msg.connect_flags == 206
    assert msg.keep_alive == 10
    assert msg.client_id == b"surgemq"
    assert msg.will_topic == b"will"
    assert msg.will_message == b"send me home"
    assert msg.username == b"surgemq"
    assert msg.password == b"password"
    assert msg.will_qos == 1
    assert msg.version == 4


def test_decode_missing_last_byte():
    with pytest.raises(MessageError):
        ConnectMessage().decode(CONNECT_BYTES[:-1])


def test_decode_ignores_extra_bytes():
    assert ConnectMessage().decode(CONNECT_BYTES + b"extra") == 60


def test_decode_empty_client_id_without_clean_session():
    with pytest.raises(ConnackError) as info:
        ConnectMessage().decode(NO_CLIENT_ID_BYTES)
    assert info.value.code == ConnackCode.IDENTIFIER_REJECTED
    assert is_connack_error(info.value)


@pytest.mark.parametrize(
    "offset, patch, code",
    [
        (4, b"MQTX", ConnackCode.INVALID_PROTOCOL_VERSION),
        (9, bytes([207]), None),
        (9, bytes([206 & ~0x40]), None),
    ],
    ids=["protocol-name", "reserved-bit", "username-without-password"],
)
def test_decode_rejects_patched_packet(offset, patch, code):
    data = bytearray(CONNECT_BYTES)
    data[offset : offset + len(patch)] = patch
    with pytest.raises(MessageError) as info:
        ConnectMessage().decode(bytes(data))
    assert getattr(info.value, "code", None) == code


def test_encode_and_len():
    msg = _build_message()
    assert len(msg) == len(CONNECT_BYTES)
    assert msg.encode() == CONNECT_BYTES


def test_encode_without_version_is_rejected():
    msg = ConnectMessage()
    msg.keep_alive = 10
    with pytest.raises(ConnackError) as info:
        msg.encode()
    assert info.value.code == ConnackCode.INVALID_PROTOCOL_VERSION


def test_keep_alive_out_of_range():
    msg = ConnectMessage()
    msg.keep_alive = 10
    with pytest.raises(MessageError):
        msg.keep_alive = 0x10000
    assert msg.keep_alive == 10


def test_decode_encode_equivalence():
    msg = ConnectMessage()
    assert msg.decode(CONNECT_BYTES) == len(CONNECT_BYTES)
    encoded = msg.encode()
    assert encoded == CONNECT_BYTES

    again = ConnectMessage()
    assert again.decode(encoded) == len(CONNECT_BYTES)
    assert again.client_id == b"surgemq"


def test_reencode_after_change():
    msg = ConnectMessage()
    msg.decode(CONNECT_BYTES)
    msg.keep_alive = 300
    encoded = msg.encode()
    assert encoded[10:12] == (300).to_bytes(2, "big")

    other = ConnectMessage()
    other.decode(encoded)
    assert other.keep_alive == 300
    assert other.password == b"password"


def test_version3_round_trip():
    msg = ConnectMessage()
    msg.set_version(3)
    msg.clean_session = True
    msg.set_client_id(b"any id!")
    encoded = msg.encode()
    assert encoded[4:10] == b"MQIsdp"

    other = ConnectMessage()
    assert other.decode(encoded) == len(encoded)
    assert other.version == 3
    assert other.client_id == b"any id!"
    assert other.clean_session is True