"""
``@cached`` for read-only repository coroutines.
"""
from functools import wraps
from typing import Callable, Any
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.cache.redis_client import cache
from rsvphub.core.logging import logger


def cache_key(key_prefix: str, args: tuple, kwargs: dict) -> str:
    """
    Readable key from the non-session arguments.

    ``event_answer_summary(db, 12)`` becomes ``rsvps:summary:12``, which is
    what ``invalidate_event_aggregates(12)`` deletes.
    """
    parts = [str(arg) for arg in args if not isinstance(arg, AsyncSession)]
    parts += [f"{k}={v}" for k, v in sorted(kwargs.items()) if not isinstance(v, AsyncSession)]
    return ":".join([key_prefix] + parts)


def cached(key_prefix: str, expire: int = 300):
    """
    Cache a coroutine's JSON-serializable result for ``expire`` seconds.

    Usage:
        @cached('rsvps:summary', expire=60)
        async def event_answer_summary(db, event_id):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            key = cache_key(key_prefix, args, kwargs)
            hit = await cache.get(key)
            if hit is not None:
                logger.debug(f"Cache hit: {key}")
                return hit

            logger.debug(f"Cache miss: {key}")
            result = await func(*args, **kwargs)
            await cache.set(key, result, expire)
            return result
        return wrapper
    return decorator
