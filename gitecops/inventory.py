import json
import logging
import platform
import socket
import subprocess
from typing import Any, Callable, Dict, List, Optional

import psutil

from .device import Device, Drive, SystemOs, Update
from .errors import InventoryError, NotSupportedError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

GIGABYTE = 1024 ** 3

# psutil reports these in partition opts on Windows
WINDOWS_DRIVE_TYPES = ('fixed', 'removable', 'cdrom', 'remote', 'ramdisk')

NETWORK_FILESYSTEMS = {'nfs', 'nfs4', 'cifs', 'smbfs', 'smb3', 'sshfs', 'fuse.sshfs', 'afpfs'}
OPTICAL_FILESYSTEMS = {'iso9660', 'udf', 'cdfs'}
MEMORY_FILESYSTEMS = {'tmpfs', 'ramfs'}

PowerShellRunner = Callable[[str], str]


class DeviceInventory:
    """Collect an inventory record for the local machine"""

    POWERSHELL_TIMEOUT = 30  # seconds

    def __init__(self,
                 system: Optional[str] = None,
                 powershell: Optional[PowerShellRunner] = None) -> None:
        """
        Args:
            system: platform.system() value to act as (default: detected)
            powershell: Callable running a PowerShell command and returning stdout
        """
        self.system: str = system or platform.system()
        self._powershell: PowerShellRunner = powershell or self._run_powershell

    @property
    def is_windows(self) -> bool:
        return self.system == 'Windows'

    def collect(self, name: Optional[str] = None) -> Device:
        """
        Build a Device for this machine.

        Windows-only details (serial number, hotfixes) are skipped elsewhere.

        Raises:
            ValidationError: the host name is not an accepted device name
        """
        device = Device.from_name(name or socket.gethostname())

        device.operating_system = self.collect_operating_system()
        for drive in self.collect_drives():
            device.add_drive(drive)

        device.total_ram = self.collect_total_ram()

        try:
            device.serial_number = self.collect_serial_number()
        except NotSupportedError as e:
            logger.info(f"Skipping serial number: {e}")
        except InventoryError as e:
            logger.warning(f"Skipping serial number: {e}")

        try:
            for update in self.collect_updates():
                device.add_update(update)
        except NotSupportedError as e:
            logger.info(f"Skipping updates: {e}")
        except InventoryError as e:
            logger.warning(f"Skipping updates: {e}")

        logger.info(
            f"Collected inventory for {device.name.normalized}: "
            f"{len(device.drives)} drive(s), {len(device.updates)} update(s)"
        )
        return device

    def collect_operating_system(self) -> SystemOs:
        service_pack = platform.win32_ver()[2] if self.is_windows else ''
        return SystemOs(
            operating_system=platform.platform(),
            version=platform.version(),
            service_pack=service_pack,
            platform=self.system
        )

    def collect_drives(self) -> List[Drive]:
        """Disk usage per ready partition, in GB"""
        drives: List[Drive] = []
        for part in psutil.disk_partitions():
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except (PermissionError, OSError) as e:
                logger.debug(f"Drive {part.mountpoint} not ready: {e}")
                continue

            drives.append(Drive(
                letter=part.mountpoint[0] if self.is_windows else part.mountpoint,
                size=usage.total / GIGABYTE,
                used=usage.used / GIGABYTE,
                drive_type=self._drive_type(part)
            ))
        return drives

    def _drive_type(self, part: Any) -> str:
        """Drive type from partition opts (Windows) or file system type"""
        if self.is_windows:
            for opt in part.opts.split(','):
                if opt in WINDOWS_DRIVE_TYPES:
                    return opt
            return 'unknown'

        fstype = part.fstype.lower()
        if fstype in NETWORK_FILESYSTEMS:
            return 'remote'
        if fstype in OPTICAL_FILESYSTEMS:
            return 'cdrom'
        if fstype in MEMORY_FILESYSTEMS:
            return 'ramdisk'
        return 'fixed' if fstype else 'unknown'

    def collect_total_ram(self) -> float:
        """Installed memory in GB"""
        return psutil.virtual_memory().total / GIGABYTE

    def collect_serial_number(self) -> str:
        for item in self._query_cim('Get-CimInstance Win32_BIOS | Select-Object SerialNumber'):
            serial = item.get('SerialNumber')
            if isinstance(serial, str):
                return serial.strip()
        return ''

    def collect_updates(self) -> List[Update]:
        updates: List[Update] = []
        query = (
            'Get-CimInstance Win32_QuickFixEngineering | '
            'Select-Object HotFixID, Description, @{n="InstalledOn";e={"$($_.InstalledOn)"}}'
        )
        for item in self._query_cim(query):
            updates.append(Update(
                hotfix_id=str(item.get('HotFixID') or ''),
                description=str(item.get('Description') or ''),
                installed_on=str(item.get('InstalledOn') or '')
            ))
        return updates

    def _query_cim(self, command: str) -> List[Dict[str, Any]]:
        """Run a CIM query through PowerShell and return its rows"""
        if not self.is_windows:
            raise NotSupportedError(f"CIM queries require Windows (running on {self.system})")

        raw = self._powershell(f"{command} | ConvertTo-Json -Compress")
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InventoryError(f"Unreadable PowerShell output: {e}") from e

        if isinstance(data, dict):
            return [data]
        return [row for row in data if isinstance(row, dict)]

    def _run_powershell(self, command: str) -> str:
        try:
            result = subprocess.run(
                ['powershell', '-NoProfile', '-NonInteractive', '-Command', command],
                capture_output=True,
                text=True,
                timeout=self.POWERSHELL_TIMEOUT,
                creationflags=getattr(subprocess, 'CREATE_NO_WINDOW', 0)
            )
        except FileNotFoundError as e:
            raise NotSupportedError("PowerShell is not available") from e
        except subprocess.TimeoutExpired as e:
            raise InventoryError(f"PowerShell query timed out after {self.POWERSHELL_TIMEOUT}s") from e

        if result.returncode != 0:
            raise InventoryError(f"PowerShell query failed: {result.stderr.strip()}")
        return result.stdout
