from .session_notifier import SessionNotifier
from .sse_cache_invalidator import SSECacheInvalidator

__all__ = [
    "SessionNotifier",
    "SSECacheInvalidator",
]
