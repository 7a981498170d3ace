"""Audit trail writer.

Recording an action is best-effort: the entry is written inside a savepoint,
so a failure loses only the entry. It is logged and never fails the request
that triggered it.
"""

import logging
import threading
import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from courtdesk.core.config import settings
from courtdesk.models.audit import AuditLog

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"


class RecentActionGuard:
    """Remembers the last (user, action) pair and when it was seen.

    A repeat of the same pair within ``window_seconds`` is reported as a
    duplicate. State lives in this process only and is lost on restart.
    """

    def __init__(self, window_seconds: float = 1.0, clock=time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._last: tuple[str, str] | None = None
        self._last_at = 0.0

    def is_duplicate(self, user: str, action: str) -> bool:
        """Check the pair and, unless it is a duplicate, remember it as the latest."""
        now = self._clock()
        with self._lock:
            if self._last == (user, action) and now - self._last_at < self.window_seconds:
                return True
            self._last = (user, action)
            self._last_at = now
            return False

    def reset(self) -> None:
        with self._lock:
            self._last = None
            self._last_at = 0.0


action_guard = RecentActionGuard(window_seconds=settings.audit_dedup_seconds)


async def record_action(
    db: AsyncSession,
    user_name: str | None,
    action: str,
    guard: RecentActionGuard = action_guard,
) -> AuditLog | None:
    """Append an audit entry unless it repeats the previous one."""
    user = user_name or SYSTEM_ACTOR
    if guard.is_duplicate(user, action):
        logger.debug("Skipping duplicate audit entry: %s %s", user, action)
        return None

    # Request writes are flushed outside the savepoint and keep their own errors
    await db.flush()

    entry = AuditLog(user=user, action=action)
    try:
        async with db.begin_nested():
            db.add(entry)
            await db.flush()
    except SQLAlchemyError:
        logger.exception("Could not record audit entry for %s: %s", user, action)
        return None
    return entry
