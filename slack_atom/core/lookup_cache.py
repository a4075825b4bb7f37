"""
Lookup Cache

Memoizes slow-changing Slack directory data (team, users, channels) for a
fixed interval. The first caller after an interval expires starts the fetch;
every caller during that interval awaits the same task, so at most one
upstream request per key is in flight. A failed fetch stays cached until the
interval runs out.

Pending fetches live in a cachetools.TTLCache, which drops them once the
interval since the fetch started has passed.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Mapping

from cachetools import TTLCache

logger = logging.getLogger(__name__)

TEAM = "team"
USERS = "users"
CHANNELS = "channels"

DEFAULT_TTL_SECONDS = 60.0


class LookupCache:
    """Time-based cache of pending or completed fetches, keyed by lookup kind."""

    def __init__(
        self,
        fetchers: Mapping[str, Callable[[], Awaitable[Any]]],
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetchers = dict(fetchers)
        self._tasks: "TTLCache[str, asyncio.Future[Any]]" = TTLCache(
            maxsize=max(len(self._fetchers), 1),
            ttl=ttl,
            timer=clock,
        )

    async def get(self, key: str) -> Any:
        """
        Return the value for ``key``, starting a new fetch if the current one is too old.

        Raises:
            KeyError: If no fetcher is registered for ``key``
            Exception: Whatever the fetch of the current interval raised
        """
        fetcher = self._fetchers[key]
        task = self._tasks.get(key)
        if task is None:
            logger.debug(f"Refreshing cached {key}")
            task = asyncio.ensure_future(fetcher())
            self._tasks[key] = task
        # Shield so a cancelled caller does not cancel the fetch shared with others
        return await asyncio.shield(task)

    def clear(self) -> None:
        self._tasks.clear()
