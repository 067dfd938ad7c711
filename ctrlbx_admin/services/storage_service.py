# =======================================================================================
# ctrlbx_admin/services/storage_service.py - Persistent Client Storage
# =======================================================================================
from typing import Dict, Iterable, Optional
from sqlalchemy import text
from ..database import DatabaseManager


def _key(key) -> str:
    # StorageKey members carry their storage name in .value
    return getattr(key, "value", key)


class LocalStorage:
    """Key/value storage that survives restarts, the dashboard's local storage."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def get_item(self, key: str) -> Optional[str]:
        row = self.db.fetch_one(
            "SELECT storage_value FROM client_storage WHERE storage_key = :k",
            {"k": _key(key)},
        )
        return row["storage_value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        self.set_items({key: value})

    def set_items(self, items: Dict[str, str]) -> None:
        """Write several keys in one transaction; either all land or none do."""
        with self.db.get_connection() as conn:
            for key, value in items.items():
                conn.execute(
                    text("DELETE FROM client_storage WHERE storage_key = :k"),
                    {"k": _key(key)},
                )
                conn.execute(
                    text("""
                        INSERT INTO client_storage (storage_key, storage_value)
                        VALUES (:k, :v)
                    """),
                    {"k": _key(key), "v": value},
                )

    def remove_items(self, keys: Iterable[str]) -> None:
        with self.db.get_connection() as conn:
            for key in keys:
                conn.execute(
                    text("DELETE FROM client_storage WHERE storage_key = :k"),
                    {"k": _key(key)},
                )
