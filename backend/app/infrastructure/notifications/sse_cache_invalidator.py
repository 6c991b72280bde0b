"""CacheInvalidator adapter that pushes invalidation events over SSE."""

import logging

from app.application.interfaces import CacheInvalidator
from app.application.services.sse_manager import SSEManager

logger = logging.getLogger(__name__)

INVALIDATE_EVENT = "invalidate"


class SSECacheInvalidator(CacheInvalidator):
    """Broadcasts ``event: invalidate`` with the stale resource key."""

    def __init__(self, sse_manager: SSEManager):
        self._sse = sse_manager

    async def invalidate(self, resource_key: str) -> None:
        delivered = await self._sse.broadcast(INVALIDATE_EVENT, {"key": resource_key})
        logger.debug("Invalidated '%s' for %d subscriber(s)", resource_key, delivered)
