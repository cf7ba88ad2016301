"""
Key-Value Entry Model

Local per-user key-value storage. Every persisted document (favorite teams,
Big Game settings, preseason flag, must-watch ids, response cache entries)
is one row holding a JSON or plain-text value.
"""

from datetime import datetime

from peewee import CharField, DateTimeField, TextField

from db.base import BaseModel


class KeyValueEntry(BaseModel):
    """
    One stored key.

    Attributes:
        key: Namespaced storage key (e.g., 'sports-tracker-must-watch')
        value: Raw stored text, usually JSON
        updated_at: When this key was last written
    """

    key = CharField(max_length=255, primary_key=True)
    value = TextField()
    updated_at = DateTimeField(default=datetime.utcnow)

    class Meta:
        table_name = "kv_entries"

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key='{self.key}')>"

    @classmethod
    def get_value(cls, key: str) -> str | None:
        """Return the stored text for a key, or None if absent."""
        entry = cls.get_or_none(cls.key == key)
        return entry.value if entry else None

    @classmethod
    def put(cls, key: str, value: str) -> None:
        """Insert or replace a key."""
        (
            cls.insert(key=key, value=value, updated_at=datetime.utcnow())
            .on_conflict_replace()
            .execute()
        )

    @classmethod
    def remove(cls, key: str) -> int:
        """Delete a key. Returns number of rows removed."""
        return cls.delete().where(cls.key == key).execute()

    @classmethod
    def keys_with_prefix(cls, prefix: str) -> list[str]:
        """List keys starting with the given prefix."""
        # LIKE is case-insensitive in SQLite, so re-check exactly
        query = cls.select(cls.key).where(cls.key.startswith(prefix))
        return [row.key for row in query if row.key.startswith(prefix)]

    @classmethod
    def all_keys(cls) -> list[str]:
        return [row.key for row in cls.select(cls.key)]
