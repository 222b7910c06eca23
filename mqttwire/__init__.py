"""Encoding and decoding of MQTT 3.1 and 3.1.1 CONNECT, PUBLISH, SUBSCRIBE,
SUBACK and UNSUBSCRIBE packets, with a pluggable authentication registry."""

__version__ = "0.1.0"

__all__ = [
    "auth",
    "connect",
    "header",
    "publish",
    "suback",
    "subscribe",
    "types",
    "unsubscribe",
]