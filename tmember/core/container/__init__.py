__all__ = [
    "AuthContainer",
    "BootConfiguration",
    "OrganizationContainer",
    "PersistentContainer",
    "StorageContainer",
    "TMemberContainer",
]

from .auth import AuthContainer
from .organization import OrganizationContainer
from .storage import PersistentContainer, StorageContainer
from .tmember import BootConfiguration, TMemberContainer
