import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from inspection_hub.errors import OperationInProgressError

logger = logging.getLogger(__name__)


def _key(client_name: str) -> str:
    return " ".join(client_name.split()).casefold()


class ClientLocks:
    """Per-client exclusivity for archive and restore.

    Acquisition never waits: a second operation on a client that is already
    being archived or restored fails immediately.
    """

    def __init__(self) -> None:
        self._held: set[str] = set()

    def is_held(self, client_name: str) -> bool:
        return _key(client_name) in self._held

    @asynccontextmanager
    async def hold(self, client_name: str, operation: str) -> AsyncIterator[None]:
        key = _key(client_name)
        # check-and-add happens without an await in between
        if key in self._held:
            raise OperationInProgressError(
                f"Another archive or restore is already running for {client_name}",
                details={"client_name": client_name, "operation": operation},
            )
        self._held.add(key)
        logger.debug("Acquired %s lock for %s", operation, client_name)
        try:
            yield
        finally:
            self._held.discard(key)
            logger.debug("Released %s lock for %s", operation, client_name)


client_locks = ClientLocks()
