from pydantic import BaseModel, Field
from datetime import datetime, timezone


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordInput(BaseModel):
    """Record fields as submitted by a client; password is plaintext."""
    title: str = Field(..., min_length=1, description="Display name")
    username: str = Field(..., description="Account username")
    password: str = Field(..., description="Plaintext password")
    login_url: str | None = None
    notes: str | None = None


class EncryptedRecord(BaseModel):
    """Record fields as handed to a store; password is a cipher blob."""
    title: str
    username: str
    encrypted_password: str
    login_url: str | None = None
    notes: str | None = None


class StoredRecord(EncryptedRecord):
    id: int
    created_at: str
    updated_at: str

    @classmethod
    def new(cls, record_id: int, record: EncryptedRecord) -> "StoredRecord":
        """A freshly created record; both timestamps are the same instant."""
        now = utc_now_iso()
        return cls(id=record_id, created_at=now, updated_at=now, **record.model_dump())


class RecordOut(BaseModel):
    """Record as returned to an authenticated client; password decrypted."""
    id: int
    title: str
    username: str
    password: str
    login_url: str | None = None
    notes: str | None = None
    created_at: str
    updated_at: str
