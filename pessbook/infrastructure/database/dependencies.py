"""Request-scoped person registry transactions."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from pessbook.core.logging import get_logger
from pessbook.infrastructure.database import session as db_session
from pessbook.infrastructure.database.unit_of_work import UnitOfWork

logger = get_logger(__name__)


@asynccontextmanager
async def registry_transaction() -> AsyncGenerator[UnitOfWork, None]:
    """Open a registry session wrapped in a unit of work.

    The work is committed when the block exits cleanly and rolled back
    when it raises; the session is closed either way.
    """
    async with db_session.get_db_session() as session:
        async with UnitOfWork(session) as uow:
            yield uow
        logger.debug("Closed registry transaction")


async def get_uow() -> AsyncGenerator[UnitOfWork, None]:
    """One registry transaction per request."""
    async with registry_transaction() as uow:
        yield uow
