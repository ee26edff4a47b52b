"""
Live viewer counter backed by Redis.

Each viewer is a member of one sorted set scored by its last heartbeat
(epoch seconds).  Members older than the timeout are pruned before every
count, so all API processes report the same number without a sweeper.

Commands: ZADD on heartbeat, ZREMRANGEBYSCORE + ZCARD on count.
"""

from __future__ import annotations

import time
from typing import Callable

import redis.asyncio as aioredis

VIEWERS_KEY = "viewers:active"


class ViewerRegistry:
    def __init__(
        self,
        client: aioredis.Redis,
        timeout_seconds: int = 30,
        clock: Callable[[], float] = time.time,
    ):
        self.redis = client
        self.timeout = timeout_seconds
        self.clock = clock

    async def heartbeat(self, viewer_id: str) -> int:
        """Record *viewer_id* as seen now and return the active count."""
        await self.redis.zadd(VIEWERS_KEY, {viewer_id: self.clock()})
        return await self.active_count()

    async def active_count(self) -> int:
        cutoff = self.clock() - self.timeout
        # Strictly older than the timeout is expired
        await self.redis.zremrangebyscore(VIEWERS_KEY, "-inf", f"({cutoff}")
        return int(await self.redis.zcard(VIEWERS_KEY))
