from .blob_storage import BlobStorage
from .cache_invalidator import CacheInvalidator
from .client_repository import ClientRepository
from .notifier import Notifier

__all__ = [
    "BlobStorage",
    "CacheInvalidator",
    "ClientRepository",
    "Notifier",
]
