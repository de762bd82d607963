import logging
import uuid
from typing import Callable, Optional

import paho.mqtt.client as mqtt

log = logging.getLogger(__name__)


class SonarMQTT:
    """
    Same text protocol as the serial link, relayed through a broker (e.g. an
    ESP bridge publishing every ``angle,distance`` line it reads).

    A payload may hold several newline-separated lines; each one is handed
    to `on_line` from paho's network thread.  Speed commands are published
    on `cmd_topic`.
    """

    def __init__(self, host, port, topic, cmd_topic,
                 on_line: Callable[[str], None],
                 on_open: Optional[Callable[["SonarMQTT"], None]] = None):
        self.host, self.port = host, int(port)
        self.topic, self.cmd_topic = topic, cmd_topic
        self.on_line = on_line
        self.on_open = on_open
        self.connected = False
        self.error: Optional[str] = None

        random_id = f"sonar-{uuid.uuid4().hex[:8]}"
        self.cli = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=random_id)
        self.cli.on_connect = self._on_connect
        self.cli.on_disconnect = self._on_disconnect
        self.cli.on_message = self._on_msg

    def connect(self) -> bool:
        try:
            self.cli.connect(self.host, self.port, 60)
        except OSError as exc:
            self.error = str(exc)
            log.error("broker %s:%s: %s", self.host, self.port, exc)
            return False
        self.cli.loop_start()
        return True

    def stop(self):
        self.cli.loop_stop()
        self.cli.disconnect()
        self.connected = False

    def send(self, text: str) -> bool:
        if not self.connected:
            log.warning("not connected, dropped %r", text.strip())
            return False
        info = self.cli.publish(self.cmd_topic, text)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            log.warning("publish to %s failed: rc=%s", self.cmd_topic, info.rc)
            return False
        return True

    def _on_connect(self, client, _userdata, _flags, reason_code, _properties=None):
        if reason_code.is_failure:
            self.connected = False
            self.error = str(reason_code)
            log.error("broker %s refused connection: %s", self.host, reason_code)
            return
        self.error = None
        client.subscribe(self.topic)
        self.connected = True
        log.info("subscribed to %s on %s", self.topic, self.host)
        if self.on_open:
            self.on_open(self)

    def _on_disconnect(self, *_):
        self.connected = False

    def _on_msg(self, _cli, _userdata, msg):
        try:
            text = msg.payload.decode("ascii")
        except UnicodeDecodeError:
            log.debug("ignoring binary payload on %s", msg.topic)
            return
        for line in text.splitlines():
            line = line.strip()
            if line:
                self.on_line(line)
