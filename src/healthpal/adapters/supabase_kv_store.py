"""Supabase-backed key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from healthpal.services.storage import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Key-value store backed by the kv_store table."""

    client: Client

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        response = (
            self.client.table("kv_store")
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite the value for a key."""
        self.client.table("kv_store").upsert(
            {
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()
