"""Base adapter interface for record store backends."""
from abc import ABC, abstractmethod
from ..record_models import EncryptedRecord, StoredRecord


class RecordStore(ABC):
    """Abstract interface for vault record persistence.

    Stores only ever see encrypted passwords.
    """

    @abstractmethod
    async def list_all(self) -> list[StoredRecord]:
        """
        List all records, newest first.

        Returns:
            Stored records ordered by creation time, descending
        """
        pass

    @abstractmethod
    async def get(self, record_id: int) -> StoredRecord | None:
        """
        Get a record by id.

        Args:
            record_id: Record identifier

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, record: EncryptedRecord) -> StoredRecord:
        """
        Persist a new record.

        Args:
            record: Record fields with an already-encrypted password

        Returns:
            The stored record with assigned id and timestamps
        """
        pass

    @abstractmethod
    async def update(self, record_id: int, record: EncryptedRecord) -> StoredRecord | None:
        """
        Replace the fields of an existing record.

        Args:
            record_id: Record identifier
            record: New fields with an already-encrypted password

        Returns:
            The updated record, or None if no such record exists
        """
        pass

    @abstractmethod
    async def delete(self, record_id: int) -> bool:
        """
        Delete a record.

        Args:
            record_id: Record identifier

        Returns:
            True if a record was deleted
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the backend is healthy and accessible.

        Returns:
            True if backend is healthy, False otherwise
        """
        pass
