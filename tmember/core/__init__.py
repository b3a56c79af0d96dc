__all__ = [
    "BootConfiguration",
    "di",
    "TMemberContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, TMemberContainer
from .provider import LoggingProvider, TimestampProvider
