"""Redis-backed analytics store.

Layout (all keys under the configured prefix):
    {prefix}events:{user_id}    list of JSON-encoded LearningEvents, oldest first
    {prefix}snapshot:{user_id}  JSON-encoded ProfileSnapshot
    {prefix}users               set of user ids with recorded events
"""

import logging

from pydantic import TypeAdapter
from redis.exceptions import RedisError

from src.modules.analytics.interface import IAnalyticsStore, ProfileSnapshot
from src.modules.analytics.schemas import LearningEvent
from src.shared.database import get_redis
from src.shared.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

_snapshot_adapter = TypeAdapter(ProfileSnapshot)


class RedisAnalyticsStore(IAnalyticsStore):
    """Analytics store persisting histories and snapshots in Redis.

    Every write goes through a MULTI/EXEC pipeline so a history is never
    observed half-replaced.
    """

    def __init__(self, redis_client=None, key_prefix: str = "analytics:") -> None:
        """Initialize the store.

        Args:
            redis_client: Optional client (defaults to the shared pool)
            key_prefix: Prefix for every key written by this store
        """
        self._client = redis_client
        self._prefix = key_prefix

    async def _redis(self):
        if self._client is None:
            self._client = await get_redis()
        return self._client

    def _events_key(self, user_id: str) -> str:
        return f"{self._prefix}events:{user_id}"

    def _snapshot_key(self, user_id: str) -> str:
        return f"{self._prefix}snapshot:{user_id}"

    @property
    def _users_key(self) -> str:
        return f"{self._prefix}users"

    async def get_events(self, user_id: str) -> list[LearningEvent]:
        try:
            client = await self._redis()
            payloads = await client.lrange(self._events_key(user_id), 0, -1)
        except RedisError as e:
            raise StoreUnavailableError("redis", str(e)) from e
        return [LearningEvent.model_validate_json(payload) for payload in payloads]

    async def set_events(self, user_id: str, events: list[LearningEvent]) -> None:
        payloads = [event.model_dump_json() for event in events]
        try:
            client = await self._redis()
            pipe = client.pipeline(transaction=True)
            pipe.delete(self._events_key(user_id))
            if payloads:
                pipe.rpush(self._events_key(user_id), *payloads)
            pipe.sadd(self._users_key, user_id)
            await pipe.execute()
        except RedisError as e:
            raise StoreUnavailableError("redis", str(e)) from e
        logger.debug(f"Stored {len(payloads)} events for user {user_id}")

    async def get_snapshot(self, user_id: str) -> ProfileSnapshot | None:
        try:
            client = await self._redis()
            payload = await client.get(self._snapshot_key(user_id))
        except RedisError as e:
            raise StoreUnavailableError("redis", str(e)) from e
        if payload is None:
            return None
        return _snapshot_adapter.validate_json(payload)

    async def set_snapshot(self, user_id: str, snapshot: ProfileSnapshot) -> None:
        payload = _snapshot_adapter.dump_json(snapshot)
        try:
            client = await self._redis()
            await client.set(self._snapshot_key(user_id), payload)
        except RedisError as e:
            raise StoreUnavailableError("redis", str(e)) from e

    async def user_ids(self) -> list[str]:
        try:
            client = await self._redis()
            members = await client.smembers(self._users_key)
        except RedisError as e:
            raise StoreUnavailableError("redis", str(e)) from e
        return sorted(members)
