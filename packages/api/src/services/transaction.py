# This project was developed with assistance from AI tools.
"""Transaction boundary and post-commit side effects.

``atomic()`` is the only place services commit. Anything that must not roll
back a committed change (e-mail, token regeneration, follow-up activity rows)
is queued on ``PostCommitActions`` and run once the commit has succeeded.
"""

import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import DatabaseError, ErrorCode

logger = logging.getLogger(__name__)


@asynccontextmanager
async def atomic(session: AsyncSession, operation: str = "operation"):
    """Commit on success, roll back on any failure.

    Driver/ORM errors are logged here and re-raised as ``DatabaseError`` so the
    raw driver message never reaches the client.
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Database error during %s", operation)
        code = (
            ErrorCode.DATABASE_CONSTRAINT_ERROR
            if isinstance(exc, IntegrityError)
            else ErrorCode.DATABASE_ERROR
        )
        raise DatabaseError(
            f"Database error during {operation}",
            code=code,
            context={"operation": operation, "error": type(exc).__name__},
        ) from exc
    except BaseException:
        await session.rollback()
        raise


class PostCommitActions:
    """Ordered side effects that run after commit; failures are logged only."""

    def __init__(self):
        self._actions: list[tuple[str, Callable[[], Awaitable[object]]]] = []

    def add(self, description: str, action: Callable[[], Awaitable[object]]) -> None:
        self._actions.append((description, action))

    def __len__(self):
        return len(self._actions)

    async def run(self) -> list[str]:
        """Run every queued action in order. Returns descriptions of the ones that failed."""
        failed: list[str] = []
        for description, action in self._actions:
            try:
                await action()
            except Exception:
                logger.exception("Post-commit action failed: %s", description)
                failed.append(description)
        self._actions.clear()
        return failed
