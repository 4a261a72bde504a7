import logging

from .config import DEFAULT_MAX_LEN, FRAMING_METHODS, NON_TRANSPARENT_FRAMING, OCTET_COUNTING
from .errors import ValidationError

logger = logging.getLogger(__name__)


class SyslogFramer:
    """Apply TCP framing or UDP truncation to an encoded syslog payload"""

    def __init__(self,
                 framing: str = OCTET_COUNTING,
                 max_len: int = DEFAULT_MAX_LEN) -> None:
        if framing not in FRAMING_METHODS:
            raise ValidationError(f"Unknown framing method: {framing}")
        if max_len <= 0:
            raise ValidationError(f"max_len must be positive, got {max_len}")
        self.framing: str = framing
        self.max_len: int = max_len

    @property
    def separator(self) -> bytes:
        """Bytes between the length prefix and the payload"""
        return b' ' if self.framing == OCTET_COUNTING else b''

    def frame(self, payload: bytes) -> bytes:
        """
        Frame a payload for a TCP stream.

        octet-counting:          b'2 hi'
        non-transparent-framing: b'2hi'

        Oversized frames are rebuilt from a payload cut to
        max_len - len(str(max_len)) bytes, less the separator.
        """
        framed = self._build_frame(payload)
        if len(framed) <= self.max_len:
            return framed

        budget = self._payload_budget()
        logger.warning(
            f"Frame of {len(framed)} bytes exceeds max_len {self.max_len}, "
            f"truncating payload to {budget} bytes"
        )
        return self._build_frame(payload[:budget])

    def truncate_datagram(self, payload: bytes) -> bytes:
        """Hard cut for UDP: keep bytes 0 .. max_len-1"""
        if len(payload) <= self.max_len:
            return payload

        logger.warning(f"Datagram of {len(payload)} bytes truncated to {self.max_len}")
        return payload[:self.max_len]

    def _build_frame(self, payload: bytes) -> bytes:
        return str(len(payload)).encode('ascii') + self.separator + payload

    def _payload_budget(self) -> int:
        """Internal: largest payload that fits once the length prefix is added"""
        budget = self.max_len - len(str(self.max_len)) - len(self.separator)
        if budget < 0:
            raise ValidationError(
                f"max_len {self.max_len} cannot hold a {self.framing} frame"
            )
        return budget


def frame_message(payload: bytes,
                  framing: str = OCTET_COUNTING,
                  max_len: int = DEFAULT_MAX_LEN) -> bytes:
    """Shorthand for SyslogFramer(framing, max_len).frame(payload)"""
    return SyslogFramer(framing, max_len).frame(payload)


__all__ = ['SyslogFramer', 'frame_message', 'OCTET_COUNTING', 'NON_TRANSPARENT_FRAMING']
