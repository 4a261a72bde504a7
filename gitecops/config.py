"""
Sink configuration.

Values resolve at call time: explicit override, then HPSINK_* environment
variable, then the documented default.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

OCTET_COUNTING = 'octet-counting'
NON_TRANSPARENT_FRAMING = 'non-transparent-framing'
FRAMING_METHODS = (OCTET_COUNTING, NON_TRANSPARENT_FRAMING)

TRANSPORT_UDP = 'udp'
TRANSPORT_TCP = 'tcp'

DEFAULT_TARGET = '127.0.0.1'
DEFAULT_PORT = 514
DEFAULT_MAX_LEN = 2048

ENV_TARGET = 'HPSINK_TARGET'
ENV_PORT = 'HPSINK_PORT'
ENV_TCP = 'HPSINK_TCP'
ENV_FRAMING = 'HPSINK_FRAMING'
ENV_MAX_LEN = 'HPSINK_MAXLEN'
ENV_CLIENT_NAME = 'HPSINK_CLIENTNAME'
ENV_TIMEOUT = 'HPSINK_TIMEOUT'


@dataclass(frozen=True)
class SinkConfig:
    """Where and how syslog messages are sent"""

    target: str = DEFAULT_TARGET
    port: int = DEFAULT_PORT
    transport: str = TRANSPORT_UDP
    framing: str = OCTET_COUNTING
    max_len: int = DEFAULT_MAX_LEN
    client_name: Optional[str] = None  # None means the local host name
    timeout: Optional[float] = None  # None keeps the OS socket default

    def __post_init__(self) -> None:
        if not self.target:
            raise ConfigError("Syslog target must not be empty")
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"Port out of range: {self.port}")
        if self.transport not in (TRANSPORT_UDP, TRANSPORT_TCP):
            raise ConfigError(f"Unknown transport: {self.transport}")
        if self.framing not in FRAMING_METHODS:
            raise ConfigError(
                f"Unknown framing method: {self.framing} "
                f"(expected one of {', '.join(FRAMING_METHODS)})"
            )
        if self.max_len <= 0:
            raise ConfigError(f"max_len must be positive, got {self.max_len}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

    @property
    def use_tcp(self) -> bool:
        return self.transport == TRANSPORT_TCP


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def _parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e


def resolve_config(environ: Optional[Mapping[str, str]] = None,
                   **overrides: Any) -> SinkConfig:
    """
    Build a SinkConfig for a single call.

    Args:
        environ: Mapping to read HPSINK_* variables from (default: os.environ)
        **overrides: Field values from the caller; None entries are ignored

    Raises:
        ConfigError: on unparseable or out-of-range values
    """
    if environ is None:
        environ = os.environ

    unknown = set(overrides) - set(SinkConfig.__dataclass_fields__) - {'use_tcp'}
    if unknown:
        raise ConfigError(f"Unknown configuration field(s): {', '.join(sorted(unknown))}")

    use_tcp = overrides.pop('use_tcp', None)
    if use_tcp is not None and overrides.get('transport') is None:
        overrides['transport'] = TRANSPORT_TCP if use_tcp else TRANSPORT_UDP

    values = {
        'target': environ.get(ENV_TARGET, DEFAULT_TARGET),
        'port': _parse_int(ENV_PORT, environ.get(ENV_PORT, str(DEFAULT_PORT))),
        'transport': TRANSPORT_TCP if environ.get(ENV_TCP, 'false').lower() == 'true' else TRANSPORT_UDP,
        'framing': environ.get(ENV_FRAMING, OCTET_COUNTING).lower(),
        'max_len': _parse_int(ENV_MAX_LEN, environ.get(ENV_MAX_LEN, str(DEFAULT_MAX_LEN))),
        'client_name': environ.get(ENV_CLIENT_NAME) or None,
        'timeout': None,
    }
    if environ.get(ENV_TIMEOUT):
        values['timeout'] = _parse_float(ENV_TIMEOUT, environ[ENV_TIMEOUT])

    for key, value in overrides.items():
        if value is not None:
            values[key] = value

    config = SinkConfig(**values)
    logger.debug(
        f"Resolved sink config: {config.transport}://{config.target}:{config.port} "
        f"(framing={config.framing}, max_len={config.max_len})"
    )
    return config
