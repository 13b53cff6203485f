"""Redis hash record store."""
import structlog
import orjson
from redis import Redis
from redis.exceptions import RedisError
from .base import RecordStore
from ..record_models import EncryptedRecord, StoredRecord, utc_now_iso

log = structlog.get_logger()


class RedisRecordStore(RecordStore):
    """Redis implementation of the record store.

    Each record is an orjson document in one hash keyed by record id;
    ids come from an INCR counter.
    """

    def __init__(self, redis_url: str, key_prefix: str = "passvault"):
        """
        Initialize Redis record store.

        Args:
            redis_url: Redis connection URL
            key_prefix: Namespace for the hash and counter keys
        """
        self.redis_url = redis_url
        self._client: Redis | None = None
        self._hash_key = f"{key_prefix}:items"
        self._counter_key = f"{key_prefix}:items:next_id"

    def _get_client(self) -> Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = Redis.from_url(
                self.redis_url,
                decode_responses=False,
                socket_connect_timeout=5,
                socket_timeout=5
            )
        return self._client

    def _write(self, stored: StoredRecord) -> None:
        self._get_client().hset(self._hash_key, str(stored.id), orjson.dumps(stored.model_dump()))

    async def list_all(self) -> list[StoredRecord]:
        try:
            entries = self._get_client().hgetall(self._hash_key)
        except RedisError as e:
            log.error("redis.list_failed", error=str(e))
            raise

        records = [StoredRecord(**orjson.loads(data)) for data in entries.values()]
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

    async def get(self, record_id: int) -> StoredRecord | None:
        try:
            data = self._get_client().hget(self._hash_key, str(record_id))
        except RedisError as e:
            log.error("redis.get_failed", error=str(e), id=record_id)
            raise

        if data is None:
            return None
        return StoredRecord(**orjson.loads(data))

    async def create(self, record: EncryptedRecord) -> StoredRecord:
        try:
            record_id = int(self._get_client().incr(self._counter_key))
            stored = StoredRecord.new(record_id, record)
            self._write(stored)
        except RedisError as e:
            log.error("redis.create_failed", error=str(e))
            raise

        log.info("record.stored", id=stored.id, adapter="redis")
        return stored

    async def update(self, record_id: int, record: EncryptedRecord) -> StoredRecord | None:
        existing = await self.get(record_id)
        if existing is None:
            return None

        stored = StoredRecord(
            id=record_id,
            created_at=existing.created_at,
            updated_at=utc_now_iso(),
            **record.model_dump(),
        )
        try:
            self._write(stored)
        except RedisError as e:
            log.error("redis.update_failed", error=str(e), id=record_id)
            raise

        log.info("record.replaced", id=record_id, adapter="redis")
        return stored

    async def delete(self, record_id: int) -> bool:
        try:
            removed = self._get_client().hdel(self._hash_key, str(record_id)) > 0
        except RedisError as e:
            log.error("redis.delete_failed", error=str(e), id=record_id)
            raise

        if removed:
            log.info("record.removed", id=record_id, adapter="redis")
        return removed

    async def health_check(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            True if Redis is accessible, False otherwise
        """
        try:
            return bool(self._get_client().ping())
        except RedisError as e:
            log.warning("redis.health_check_failed", error=str(e))
            return False

    def close(self):
        """Close Redis connection."""
        if self._client:
            self._client.close()
            self._client = None
