import logging
import socket
from dataclasses import replace
from datetime import datetime
from typing import Optional, Union

from .config import TRANSPORT_TCP, TRANSPORT_UDP, SinkConfig, resolve_config
from .errors import TransportError
from .framing import SyslogFramer
from .syslog_message import DEFAULT_FACILITY, DEFAULT_SEVERITY, SyslogMessage

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class SyslogSender:
    """Send single syslog messages over UDP or TCP"""

    def __init__(self, config: Optional[SinkConfig] = None) -> None:
        """
        Initialize the sender.

        Args:
            config: Sink settings used when a send() argument is left as None.
                    Resolved from HPSINK_* environment variables when omitted.
        """
        self.config: SinkConfig = config if config is not None else resolve_config()

    def _effective_config(self, **overrides) -> SinkConfig:
        """Per-call settings: explicit arguments win over the sender's config"""
        use_tcp = overrides.pop('use_tcp', None)
        if use_tcp is not None:
            overrides['transport'] = TRANSPORT_TCP if use_tcp else TRANSPORT_UDP
        return replace(self.config, **{key: value for key, value in overrides.items() if value is not None})

    def build(self,
              message: str,
              severity: Union[int, str] = DEFAULT_SEVERITY,
              facility: Union[int, str] = DEFAULT_FACILITY,
              client_name: Optional[str] = None,
              timestamp: Union[datetime, str, None] = None) -> SyslogMessage:
        """Build the syslog line without sending it"""
        if client_name is None:
            client_name = self.config.client_name
        return SyslogMessage.build(
            message,
            severity=severity,
            facility=facility,
            hostname=client_name,
            timestamp=timestamp
        )

    def frame(self, syslog_message: SyslogMessage, config: Optional[SinkConfig] = None) -> bytes:
        """Return the exact bytes send() would write for this message"""
        config = config or self.config
        framer = SyslogFramer(framing=config.framing, max_len=config.max_len)
        payload = syslog_message.encode()

        if config.use_tcp:
            return framer.frame(payload)
        return framer.truncate_datagram(payload)

    def send(self,
             message: str,
             severity: Union[int, str] = DEFAULT_SEVERITY,
             facility: Union[int, str] = DEFAULT_FACILITY,
             target: Optional[str] = None,
             port: Optional[int] = None,
             use_tcp: Optional[bool] = None,
             framing: Optional[str] = None,
             max_len: Optional[int] = None,
             client_name: Optional[str] = None,
             timestamp: Union[datetime, str, None] = None,
             passthru: bool = False) -> Optional[str]:
        """
        Build, frame and send one syslog message.

        Returns:
            The original message when passthru is set, otherwise None

        Raises:
            TransportError: socket connect/write failed and passthru is not set
            ValidationError: bad severity, facility or settings
        """
        config = self._effective_config(
            target=target,
            port=port,
            use_tcp=use_tcp,
            framing=framing,
            max_len=max_len,
            client_name=client_name
        )
        syslog_message = self.build(
            message,
            severity=severity,
            facility=facility,
            client_name=config.client_name,
            timestamp=timestamp
        )
        data = self.frame(syslog_message, config)

        try:
            if config.use_tcp:
                self._send_tcp(data, config)
            else:
                self._send_udp(data, config)
        except (OSError, UnicodeError) as e:
            error = TransportError(
                f"Failed to send syslog message to {config.target}:{config.port} "
                f"over {config.transport.upper()}: {e}",
                target=config.target,
                port=config.port
            )
            if not passthru:
                raise error from e
            logger.error(str(error))
            return message

        logger.debug(
            f"Sent {len(data)} bytes to {config.target}:{config.port} over {config.transport.upper()}"
        )
        return message if passthru else None

    def _send_udp(self, data: bytes, config: SinkConfig) -> None:
        """Fire-and-forget datagram"""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            if config.timeout is not None:
                sock.settimeout(config.timeout)
            sock.sendto(data, (config.target, config.port))
        finally:
            sock.close()

    def _send_tcp(self, data: bytes, config: SinkConfig) -> None:
        """Connect, write the frame, close"""
        sock = socket.create_connection((config.target, config.port), timeout=config.timeout)
        try:
            sock.sendall(data)
        finally:
            sock.close()


def send_syslog(message: str, **kwargs) -> Optional[str]:
    """One-off send with configuration resolved from the environment"""
    return SyslogSender().send(message, **kwargs)
