"""Exception hierarchy shared by the transport, naming and policy modules"""


class GitecOpsError(Exception):
    """Base class for every error raised by gitecops"""


class TransportError(GitecOpsError, ConnectionError):
    """Socket connect or write failed while sending a syslog message"""

    def __init__(self, message: str, target: str = '', port: int = 0) -> None:
        super().__init__(message)
        self.target: str = target
        self.port: int = port


class ValidationError(GitecOpsError, ValueError):
    """Input did not match any accepted form"""


class ConfigError(ValidationError):
    """A configuration value could not be resolved"""


class NotSupportedError(GitecOpsError, NotImplementedError):
    """Feature is unavailable on this platform"""


class InventoryError(GitecOpsError):
    """A local inventory query failed"""
