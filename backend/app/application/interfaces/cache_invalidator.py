"""Cache invalidation port: tells list views their data is stale."""

from abc import ABC, abstractmethod


class CacheInvalidator(ABC):
    """Invalidates cached query results by resource key (``clients``, ...)."""

    @abstractmethod
    async def invalidate(self, resource_key: str) -> None:
        ...
