# mqttwire

`mqttwire` turns MQTT 3.1 and 3.1.1 control packets into bytes and back,
checking each one against the rules of the specification as it goes. It
has no dependencies outside the standard library.

It handles these packet types:

| Module                  | Class                | Packet      |
|-------------------------|----------------------|-------------|
| `mqttwire.connect`      | `ConnectMessage`     | CONNECT     |
| `mqttwire.publish`      | `PublishMessage`     | PUBLISH     |
| `mqttwire.subscribe`    | `SubscribeMessage`   | SUBSCRIBE   |
| `mqttwire.suback`       | `SubackMessage`      | SUBACK      |
| `mqttwire.unsubscribe`  | `UnsubscribeMessage` | UNSUBSCRIBE |

All of them build on `mqttwire.header.Header`, the fixed header shared by
every control packet.

## Installing

```
pip install mqttwire
```

## Building packets

Create a packet, fill it in, and call `encode()` to get the bytes to send:

```python
from mqttwire.connect import ConnectMessage
from mqttwire.publish import PublishMessage
from mqttwire.subscribe import SubscribeMessage
from mqttwire.unsubscribe import UnsubscribeMessage

connect = ConnectMessage()
connect.set_version(4)             # 4 for MQTT 3.1.1, 3 for MQTT 3.1
connect.clean_session = True
connect.set_client_id(b"sensor42")
connect.keep_alive = 30
connect.will_topic = b"/status/sensor42"
connect.will_message = b"offline"
connect.set_will_qos(1)
wire = connect.encode()

publish = PublishMessage()
publish.set_topic(b"/home/kitchen/temperature")
publish.set_qos(1)
publish.retain = True
publish.payload = b"21.5"
wire = publish.encode()

subscribe = SubscribeMessage()
subscribe.add_topic(b"/home/+/temperature", 1)
subscribe.add_topic(b"/alerts/#", 2)
wire = subscribe.encode()

unsubscribe = UnsubscribeMessage()
unsubscribe.add_topic(b"/alerts/#")
wire = unsubscribe.encode()
```

A PUBLISH with QoS 1 or 2, a SUBSCRIBE and an UNSUBSCRIBE that are encoded
without a packet identifier get a fresh one from
`mqttwire.types.next_packet_id()`, a process-wide 16-bit counter. Set
`packet_id` yourself to choose one.

`len(message)` gives the size of the encoded packet.

## Reading packets

Create the packet you expect and call `decode(src)` on the buffer. It
returns the number of bytes the packet took; bytes after that are left
alone. The packet type in the buffer must match the class.

```python
from mqttwire.suback import SubackMessage

suback = SubackMessage()
used = suback.decode(data)
print(suback.packet_id, list(suback.return_codes))
```

Once decoded, a packet that has not been changed encodes back to exactly
the bytes it was read from.

A packet that breaks the rules raises `mqttwire.types.MessageError`. A
CONNECT that a server should answer with a refusal (unsupported protocol
level, rejected client identifier) raises `mqttwire.types.ConnackError`,
a subclass of `MessageError`; its `code` attribute holds the `ConnackCode`
to report, and `is_connack_error(err)` tells the two kinds apart.

## Helpers

`mqttwire.types` also provides:

- the `MessageType`, `QoS` and `ConnackCode` enumerations, with
  descriptions, default header flags and error texts;
- `valid_topic`, `valid_qos` and `valid_version` checks;
- `read_lp_bytes` and `write_lp_bytes` for the two-byte length-prefixed
  strings used throughout the protocol.

## Authentication

`mqttwire.auth` holds a small registry of authenticators. Subclass
`Authenticator` and implement `authenticate(user_id, credentials)`, raising
`AuthError` when the credentials are refused; register it under a name
with `register(name, provider)`, and remove it with `unregister(name)`.
An `AuthManager` looks a provider up by name (raising `LookupError` for an
unknown one) and forwards `authenticate(user_id, credentials)` to it.

Two `MockAuthenticator` instances come registered: `"mockSuccess"` accepts
everyone and `"mockFailure"` refuses everyone, which is handy in tests.

## What it does not do

- It has no classes for CONNACK, PUBACK, PUBREC, PUBREL, PUBCOMP,
  UNSUBACK, PINGREQ, PINGRESP or DISCONNECT packets. The `MessageType`
  and `ConnackCode` enumerations name them, but there is nothing to encode
  or decode them with.
- It cannot look at an unknown buffer and pick the right packet class for
  you; you must know which packet to expect.
- It does not open sockets or run a broker or client: you hand it bytes
  you have read, and it hands you bytes to write.

## Running the tests

```
pip install -e ".[test]"
pytest
```