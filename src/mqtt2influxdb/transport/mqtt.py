from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional
from urllib.parse import unquote, urlparse

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], Any]

DEFAULT_PORTS = {"mqtt": 1883, "tcp": 1883, "mqtts": 8883, "ssl": 8883}
TLS_SCHEMES = {"mqtts", "ssl"}


@dataclass(frozen=True)
class BrokerAddress:
    host: str
    port: int
    tls: bool = False
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_url(cls, url: str) -> "BrokerAddress":
        """
        mqtt://[user[:password]@]host[:port]   (plain, default port 1883)
        mqtts://[user[:password]@]host[:port]  (TLS, default port 8883)
        """
        parsed = urlparse(url)
        scheme = (parsed.scheme or "").lower()
        if scheme not in DEFAULT_PORTS:
            raise ValueError(
                f"Unsupported MQTT URL scheme '{parsed.scheme}'. "
                f"Expected one of {sorted(DEFAULT_PORTS)}"
            )
        if not parsed.hostname:
            raise ValueError(f"MQTT URL has no host: {url}")

        return cls(
            host=parsed.hostname,
            port=parsed.port or DEFAULT_PORTS[scheme],
            tls=scheme in TLS_SCHEMES,
            username=unquote(parsed.username) if parsed.username else None,
            password=unquote(parsed.password) if parsed.password else None,
        )


class MqttSource:
    """
    Delivers (topic, payload) pairs from an MQTT broker to a handler.

    Subscriptions are (re)issued on every successful connect, so they
    survive broker restarts.
    """

    def __init__(
        self,
        url: str,
        client_id: str,
        topics: Iterable[str],
        *,
        keepalive: int = 5,
        qos: int = 0,
        client: Optional[Any] = None,
    ) -> None:
        self.address = BrokerAddress.from_url(url)
        self.client_id = client_id
        self.topics: List[str] = list(topics)
        self.keepalive = keepalive
        self.qos = qos
        self._handler: Optional[MessageHandler] = None

        self.client = client or mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2, client_id=client_id
        )
        if self.address.username:
            self.client.username_pw_set(self.address.username, self.address.password)
        if self.address.tls:
            self.client.tls_set()

        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message
        self.client.on_disconnect = self._on_disconnect

    # ------------------------------------------------------------------
    # paho callbacks
    # ------------------------------------------------------------------
    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if getattr(reason_code, "is_failure", False):
            logger.error("MQTT connection refused: %s", reason_code)
            return

        logger.info("Connected to MQTT")
        for topic in self.topics:
            client.subscribe(topic, qos=self.qos)
            logger.debug("Subscribed to %s", topic)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        logger.warning("Disconnected from MQTT: %s", reason_code)

    def _on_message(self, client, userdata, message) -> None:
        if self._handler is None:
            return
        self._handler(message.topic, bytes(message.payload))

    # ------------------------------------------------------------------
    def run_forever(self, handler: MessageHandler) -> None:
        """Connect and dispatch messages to ``handler`` until interrupted."""
        self._handler = handler
        logger.debug(
            "Connecting to MQTT server: %s:%s (client_id=%s)",
            self.address.host, self.address.port, self.client_id,
        )
        self.client.connect(self.address.host, self.address.port, keepalive=self.keepalive)
        try:
            self.client.loop_forever()
        finally:
            self.client.disconnect()
