"""
gitecops

Device operations toolkit: sends RFC 5424 style syslog messages over UDP or
TCP, normalizes device names and keeps device inventory and feature policy
records.
"""

from .config import SinkConfig, resolve_config
from .device import Device, DeviceName, Drive, SystemOs, Update, normalize
from .errors import (ConfigError, GitecOpsError, InventoryError, NotSupportedError,
                     TransportError, ValidationError)
from .framing import SyslogFramer, frame_message
from .inventory import DeviceInventory
from .policy_store import FeaturePolicy, JsonPolicyStore, PolicyDocument, PolicyStore
from .syslog_message import SyslogMessage, facility_code, format_timestamp, severity_code
from .syslog_sender import SyslogSender, send_syslog

__all__ = [
    'ConfigError',
    'Device',
    'DeviceInventory',
    'DeviceName',
    'Drive',
    'FeaturePolicy',
    'GitecOpsError',
    'InventoryError',
    'JsonPolicyStore',
    'NotSupportedError',
    'PolicyDocument',
    'PolicyStore',
    'SinkConfig',
    'SyslogFramer',
    'SyslogMessage',
    'SyslogSender',
    'SystemOs',
    'TransportError',
    'Update',
    'ValidationError',
    'facility_code',
    'format_timestamp',
    'frame_message',
    'normalize',
    'resolve_config',
    'send_syslog',
    'severity_code',
]

__version__ = '1.0.0'
