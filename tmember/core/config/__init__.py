__all__ = [
    "AuthSecrets",
    "AuthSettings",
    "DatabaseSecrets",
    "DatabaseSettings",
    "LoggingSettings",
    "PersistentSettings",
    "Secrets",
    "ServeSettings",
    "Settings",
    "StorageSettings",
    "WebSettings",
]


from .logging import LoggingSettings
from .secrets import AuthSecrets, DatabaseSecrets, Secrets
from .settings import Settings
from .storage import DatabaseSettings, PersistentSettings, StorageSettings
from .web import AuthSettings, ServeSettings, WebSettings
