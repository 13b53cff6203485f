"""Record service: the only path between handlers and the record store.

Passwords are encrypted before they reach a store and decrypted before
they leave this module.
"""
from ..adapters.base import RecordStore
from ..adapters.memory import InMemoryRecordStore
from ..adapters.redis_store import RedisRecordStore
from ..config import Settings
from ..record_models import EncryptedRecord, RecordInput, RecordOut, StoredRecord
from .crypto import CipherService, CryptoIntegrityError
import structlog

log = structlog.get_logger()


class RecordNotFoundError(LookupError):
    """Raised when a record id does not exist"""

    def __init__(self, record_id: int):
        super().__init__(f"Record {record_id} not found")
        self.record_id = record_id


class RecordService:
    """
    Vault record operations with transparent password encryption.
    """

    def __init__(self, store: RecordStore, cipher: CipherService, metrics=None):
        """
        Args:
            store: Persistence backend
            cipher: Cipher bound to the vault encryption key
            metrics: Optional Metrics instance for record counters
        """
        self._store = store
        self._cipher = cipher
        self._metrics = metrics

    @property
    def store(self) -> RecordStore:
        return self._store

    def _seal(self, data: RecordInput) -> EncryptedRecord:
        fields = data.model_dump(exclude={"password"})
        return EncryptedRecord(encrypted_password=self._cipher.encrypt(data.password), **fields)

    def _open(self, stored: StoredRecord) -> RecordOut:
        try:
            password = self._cipher.decrypt(stored.encrypted_password)
        except CryptoIntegrityError:
            log.error("record.integrity_failure", id=stored.id)
            if self._metrics:
                self._metrics.decrypt_failures_total.inc()
            raise
        fields = stored.model_dump(exclude={"encrypted_password"})
        return RecordOut(password=password, **fields)

    def _count(self, operation: str) -> None:
        if self._metrics:
            self._metrics.record_operation(operation)

    async def list_records(self) -> list[RecordOut]:
        records = [self._open(stored) for stored in await self._store.list_all()]
        self._count("list")
        return records

    async def get_record(self, record_id: int) -> RecordOut:
        stored = await self._store.get(record_id)
        if stored is None:
            raise RecordNotFoundError(record_id)
        self._count("read")
        return self._open(stored)

    async def create_record(self, data: RecordInput) -> RecordOut:
        stored = await self._store.create(self._seal(data))
        log.info("record.created", id=stored.id)
        self._count("create")
        return self._open(stored)

    async def update_record(self, record_id: int, data: RecordInput) -> RecordOut:
        stored = await self._store.update(record_id, self._seal(data))
        if stored is None:
            raise RecordNotFoundError(record_id)
        log.info("record.updated", id=record_id)
        self._count("update")
        return self._open(stored)

    async def delete_record(self, record_id: int) -> None:
        if not await self._store.delete(record_id):
            raise RecordNotFoundError(record_id)
        log.info("record.deleted", id=record_id)
        self._count("delete")


def create_record_store(settings: Settings) -> RecordStore:
    """
    Create the record store based on configuration.

    Returns:
        RecordStore instance based on the RECORD_STORE setting
    """
    if settings.RECORD_STORE == "redis":
        if not settings.REDIS_URL:
            log.warning(
                "store.fallback",
                requested="redis",
                actual="memory",
                reason="REDIS_URL not configured"
            )
            return InMemoryRecordStore()

        log.info("store.selected", type="redis")
        return RedisRecordStore(redis_url=str(settings.REDIS_URL))

    log.info("store.selected", type="memory")
    return InMemoryRecordStore()
