# =======================================================================================
# ctrlbx_admin/database.py - Client Storage Database Management
# =======================================================================================
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool
from contextlib import contextmanager
from typing import Optional
from .config import config

class DatabaseManager:
    """Manages the connection to the client-side storage database."""

    def __init__(self, url: Optional[str] = None):
        url = url or config.STORE_URL
        options = {"pool_pre_ping": True, "future": True}
        if not url.startswith("sqlite"):
            options.update(poolclass=QueuePool, pool_size=5, max_overflow=5)
        self.engine: Engine = create_engine(url, **options)
        self.create_schema()

    def create_schema(self):
        """Create the key/value table backing client storage."""
        with self.get_connection() as conn:
            conn.execute(
                text("""
                    CREATE TABLE IF NOT EXISTS client_storage (
                        storage_key VARCHAR(100) PRIMARY KEY,
                        storage_value TEXT NOT NULL
                    )
                """)
            )

    @contextmanager
    def get_connection(self):
        """Get a database connection with automatic commit/rollback."""
        with self.engine.begin() as conn:
            yield conn

    def fetch_one(self, query: str, params: dict = None):
        """Fetch a single result."""
        with self.get_connection() as conn:
            result = conn.execute(text(query), params or {})
            return result.mappings().first()

    def dispose(self):
        self.engine.dispose()
