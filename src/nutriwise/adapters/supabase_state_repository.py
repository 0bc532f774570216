"""Supabase repository for the persisted state blobs."""

from dataclasses import dataclass

from supabase import Client

from nutriwise.services.session import StateRepository


@dataclass
class SupabaseStateRepository(StateRepository):
    """Stores each named blob as one row of the `app_state` table."""

    client: Client
    table_name: str = "app_state"

    def load_blob(self, name: str) -> str | None:
        """Return the JSON text stored under a name."""
        response = (
            self.client.table(self.table_name)
            .select("name, payload")
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        payload = response.data[0].get("payload")
        return payload if isinstance(payload, str) else None

    def save_blob(self, name: str, payload: str) -> None:
        """Insert or replace the JSON text stored under a name."""
        self.client.table(self.table_name).upsert(
            {"name": name, "payload": payload}, on_conflict="name"
        ).execute()
