"""Archive / restore / purge transitions for a client record.

    Active ⇄ Archived      flag flip, reversible
    Archived → Purged      hard delete, dependent trip/invoice references nulled first
"""

import logging

from app.application.interfaces import CacheInvalidator, ClientRepository, Notifier
from app.domain.entities import Severity
from app.domain.exceptions import ClientTransitionError, EntityNotFoundError

logger = logging.getLogger(__name__)

ARCHIVE = "archive"
RESTORE = "restore"
PURGE = "purge"


class ClientLifecycleService:
    """Runs one store call per transition and reports failures per transition.

    Every failure is raised as ``ClientTransitionError`` carrying the
    transition name, so the caller can show it inline next to the
    confirmation that triggered it.
    """

    def __init__(
        self,
        repository: ClientRepository,
        notifier: Notifier,
        cache_invalidator: CacheInvalidator,
    ):
        self._repository = repository
        self._notifier = notifier
        self._cache = cache_invalidator

    async def archive(self, client_id: str) -> None:
        await self._set_archived(ARCHIVE, client_id, True)
        self._notifier.notify(
            Severity.SUCCESS,
            "Client archived",
            "The client has been moved to archive successfully.",
        )
        await self._cache.invalidate("clients")

    async def restore(self, client_id: str) -> None:
        await self._set_archived(RESTORE, client_id, False)
        self._notifier.notify(
            Severity.SUCCESS, "Client restored", "The client has been restored successfully."
        )
        await self._cache.invalidate("clients")

    async def purge(self, client_id: str) -> None:
        """Permanently delete an archived client."""
        client = await self._repository.get_by_id(client_id)
        if client is None:
            raise ClientTransitionError(PURGE, client_id, str(EntityNotFoundError("Client", client_id)))
        if not client.is_archived:
            raise ClientTransitionError(
                PURGE, client_id, "Only archived clients can be permanently deleted"
            )

        try:
            deleted = await self._repository.purge(client_id)
        except Exception as exc:
            logger.exception("Permanently deleting client %s failed", client_id)
            raise ClientTransitionError(
                PURGE, client_id, f"Failed to permanently delete client: {_reason(exc)}"
            ) from exc
        if not deleted:
            raise ClientTransitionError(PURGE, client_id, str(EntityNotFoundError("Client", client_id)))

        logger.info("Client %s permanently deleted", client_id)
        self._notifier.notify(
            Severity.SUCCESS, "Client deleted", "The client has been permanently deleted."
        )
        await self._cache.invalidate("clients")

    async def _set_archived(self, transition: str, client_id: str, archived: bool) -> None:
        try:
            found = await self._repository.set_archived(client_id, archived)
        except Exception as exc:
            logger.exception("Client %s: %s failed", client_id, transition)
            raise ClientTransitionError(
                transition, client_id, f"Failed to {transition} client: {_reason(exc)}"
            ) from exc
        if not found:
            raise ClientTransitionError(transition, client_id, str(EntityNotFoundError("Client", client_id)))
        logger.info("Client %s: %s", client_id, transition)


def _reason(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc)
