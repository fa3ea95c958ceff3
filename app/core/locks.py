import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis

from app.core.config import EVENT_LOCK_BLOCKING_TIMEOUT, EVENT_LOCK_TIMEOUT, get_redis_url
from app.core.exceptions import LockUnavailableError

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


def event_lock_key(event_id: int) -> str:
    return f"event_lock:{event_id}"


@contextmanager
def event_lock(event_id: int) -> Iterator[None]:
    """
    Hold the per-event Redis lock for the duration of the block.
    Every read-decide-write sequence on an event's seats runs under it.
    The client is closed on exit, whether or not the lock was obtained.
    """
    redis_client = get_redis_client()
    try:
        lock = redis_client.lock(
            event_lock_key(event_id),
            timeout=EVENT_LOCK_TIMEOUT,
            blocking_timeout=EVENT_LOCK_BLOCKING_TIMEOUT,
        )

        try:
            acquired = lock.acquire(blocking=True)
        except redis.exceptions.RedisError as exc:
            logger.error("Redis unavailable while locking event %s: %s", event_id, exc)
            raise LockUnavailableError("Could not acquire lock, please try again.") from exc

        if not acquired:
            logger.warning("Timed out waiting for lock on event %s", event_id)
            raise LockUnavailableError("Could not acquire lock, please try again.")

        try:
            yield
        finally:
            try:
                lock.release()
            except redis.exceptions.LockError:
                # the lock outlived its timeout; the work above has already finished
                logger.warning("Lock on event %s expired before release", event_id)
    finally:
        redis_client.close()
