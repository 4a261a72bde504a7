import socket
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Union

from .errors import ValidationError


# Syslog severity levels
SEVERITY_CODES: Dict[str, int] = {
    'emergency': 0,
    'alert': 1,
    'critical': 2,
    'error': 3,
    'warning': 4,
    'notice': 5,
    'informational': 6,
    'debug': 7
}

SEVERITY_ALIASES: Dict[str, str] = {
    'emerg': 'emergency',
    'crit': 'critical',
    'err': 'error',
    'warn': 'warning',
    'info': 'informational',
}

# Syslog facilities
FACILITY_CODES: Dict[str, int] = {
    'kern': 0, 'user': 1, 'mail': 2, 'daemon': 3,
    'auth': 4, 'syslog': 5, 'lpr': 6, 'news': 7,
    'uucp': 8, 'cron': 9, 'authpriv': 10, 'ftp': 11,
    'ntp': 12, 'security': 13, 'console': 14, 'solaris-cron': 15,
    'local0': 16, 'local1': 17, 'local2': 18, 'local3': 19,
    'local4': 20, 'local5': 21, 'local6': 22, 'local7': 23
}

DEFAULT_SEVERITY = SEVERITY_CODES['informational']
DEFAULT_FACILITY = FACILITY_CODES['user']

TIMESTAMP_FORMAT = '%Y:%m:%d:-%H:%M:%S'


def _resolve_code(value: Union[int, str], codes: Dict[str, int], aliases: Dict[str, str],
                  kind: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {kind}: {value!r}")

    if isinstance(value, int):
        if value not in codes.values():
            raise ValidationError(f"{kind.capitalize()} code out of range: {value}")
        return value

    name = str(value).strip().lower()
    if name.isdigit():
        return _resolve_code(int(name), codes, aliases, kind)
    name = aliases.get(name, name)
    if name not in codes:
        raise ValidationError(f"Unknown {kind}: {value!r}")
    return codes[name]


def severity_code(value: Union[int, str]) -> int:
    """Map a severity name or number to its RFC 5424 code (0-7)"""
    return _resolve_code(value, SEVERITY_CODES, SEVERITY_ALIASES, 'severity')


def facility_code(value: Union[int, str]) -> int:
    """Map a facility name or number to its RFC 5424 code (0-23)"""
    return _resolve_code(value, FACILITY_CODES, {}, 'facility')


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format a moment as 'yyyy:MM:dd:-HH:mm:ss zzz', e.g. '2025:11:17:-10:30:45 +01:00'.
    Naive datetimes are taken as local time.
    """
    if moment is None:
        moment = datetime.now()
    moment = moment.astimezone()

    offset = moment.strftime('%z')  # +0100
    return f"{moment.strftime(TIMESTAMP_FORMAT)} {offset[:3]}:{offset[3:5]}"


@dataclass(frozen=True)
class SyslogMessage:
    """A single syslog line: <priority>timestamp hostname body"""

    priority: int
    timestamp: str
    hostname: str
    body: str

    @classmethod
    def build(cls,
              body: str,
              severity: Union[int, str] = DEFAULT_SEVERITY,
              facility: Union[int, str] = DEFAULT_FACILITY,
              hostname: Optional[str] = None,
              timestamp: Union[datetime, str, None] = None) -> 'SyslogMessage':
        """
        Build a message from its parts.

        Args:
            body: Free-text message
            severity: Severity name or code (default: informational)
            facility: Facility name or code (default: user)
            hostname: Client name (default: local host name)
            timestamp: datetime or preformatted string (default: now)
        """
        priority = facility_code(facility) * 8 + severity_code(severity)

        if hostname is None:
            hostname = socket.gethostname()
        if not isinstance(timestamp, str):
            timestamp = format_timestamp(timestamp)

        return cls(priority=priority, timestamp=timestamp, hostname=hostname, body=body)

    @property
    def severity(self) -> int:
        return self.priority & 0x07

    @property
    def facility(self) -> int:
        return self.priority >> 3

    def to_line(self) -> str:
        return f"<{self.priority}>{self.timestamp} {self.hostname} {self.body}"

    def encode(self) -> bytes:
        """ASCII payload; characters outside ASCII become '?'"""
        return self.to_line().encode('ascii', errors='replace')

    def __str__(self) -> str:
        return self.to_line()
