"""
Device naming and inventory records.

Accepted device names (case-insensitive, first match wins):
    CTE-123-V1234     canonical, returned uppercased
    CTE123V12345      compact, hyphens inserted
    CTEV1234V12345    extended compact, rewritten to CTE-V1234-V12345
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern

from .errors import ValidationError

HYPHEN_PATTERN: Pattern[str] = re.compile(r'CTE-([A-Z]?\d{3})-V(\d{4,5})', re.IGNORECASE | re.ASCII)
COMPACT_PATTERN: Pattern[str] = re.compile(r'CTE([A-Z]?\d{3})V(\d{4,5})', re.IGNORECASE | re.ASCII)
EXTENDED_PATTERN: Pattern[str] = re.compile(r'CTEV(\d{3,4})V(\d{5})', re.IGNORECASE | re.ASCII)


def normalize(raw: str) -> str:
    """
    Return the canonical form of a device name.

    Raises:
        ValidationError: raw matches none of the accepted patterns
    """
    if not isinstance(raw, str):
        raise ValidationError(f"Device name must be a string, got {type(raw).__name__}")
    name = raw.upper()

    if HYPHEN_PATTERN.fullmatch(name):
        return name

    match = COMPACT_PATTERN.fullmatch(name)
    if match:
        return f"CTE-{match.group(1)}-V{match.group(2)}"

    match = EXTENDED_PATTERN.fullmatch(name)
    if match:
        return f"CTE-V{match.group(1)}-V{match.group(2)}"

    raise ValidationError(f"Invalid device name format: {raw}")


@dataclass(frozen=True)
class DeviceName:
    raw: str
    normalized: str
    is_valid: bool  # raw was already canonical

    @classmethod
    def parse(cls, raw: str) -> 'DeviceName':
        normalized = normalize(raw)
        return cls(raw=raw, normalized=normalized, is_valid=raw.upper() == normalized)

    @property
    def asset_number(self) -> str:
        return self.normalized.split('-')[2]

    def __str__(self) -> str:
        return self.normalized


@dataclass
class Drive:
    """Disk usage for one drive root; sizes in GB"""

    letter: str = 'C'
    size: float = 0.0
    used: float = 0.0
    drive_type: str = 'unknown'

    @property
    def free(self) -> float:
        return self.size - self.used

    @property
    def percent_used(self) -> float:
        return (self.used / self.size) * 100 if self.size > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'letter': self.letter,
            'size': self.size,
            'used': self.used,
            'free': self.free,
            'percent_used': self.percent_used,
            'drive_type': self.drive_type,
        }


@dataclass
class SystemOs:
    operating_system: str = ''
    version: str = ''
    service_pack: str = ''
    platform: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'operating_system': self.operating_system,
            'version': self.version,
            'service_pack': self.service_pack,
            'platform': self.platform,
        }


@dataclass
class Update:
    hotfix_id: str = ''
    description: str = ''
    installed_on: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hotfix_id': self.hotfix_id,
            'description': self.description,
            'installed_on': self.installed_on,
        }


@dataclass
class Device:
    """Inventory record for a single managed device"""

    name: DeviceName
    serial_number: str = ''
    total_ram: float = 0.0  # GB
    operating_system: SystemOs = field(default_factory=SystemOs)
    drives: List[Drive] = field(default_factory=list)
    updates: List[Update] = field(default_factory=list)

    @classmethod
    def from_name(cls, raw: str) -> 'Device':
        """
        Create a device record from a raw host name.

        Raises:
            ValidationError: the name is not an accepted device name
        """
        return cls(name=DeviceName.parse(raw))

    @property
    def asset_number(self) -> str:
        return self.name.asset_number

    def add_drive(self, drive: Optional[Drive]) -> None:
        if drive is None:
            raise ValueError("drive must not be None")
        self.drives.append(drive)

    def add_update(self, update: Optional[Update]) -> None:
        if update is None:
            raise ValueError("update must not be None")
        self.updates.append(update)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'device_name': self.name.raw.upper(),
            'normalized_name': self.name.normalized,
            'is_valid_device_name': self.name.is_valid,
            'asset_number': self.asset_number,
            'serial_number': self.serial_number,
            'total_ram': self.total_ram,
            'operating_system': self.operating_system.to_dict(),
            'drives': [drive.to_dict() for drive in self.drives],
            'updates': [update.to_dict() for update in self.updates],
        }
