# =======================================================================================
# knocklock/database.py - Database Management
# =======================================================================================
import json
import logging
from typing import Any, Dict, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import QueuePool, StaticPool
from contextlib import contextmanager
from .config import config

logger = logging.getLogger(__name__)

# One row per record; `path` is the collection path, `data` the JSON document.
SCHEMA = """
    CREATE TABLE IF NOT EXISTS documents (
        path VARCHAR(255) NOT NULL,
        id   VARCHAR(64)  NOT NULL,
        data TEXT         NOT NULL,
        PRIMARY KEY (path, id)
    )
"""

class DatabaseManager:
    """Manages database connections and document reads/writes."""

    def __init__(self, db_url: Optional[str] = None):
        self.db_url = db_url or config.DB_URL
        self.engine: Optional[Engine] = None

    def open(self) -> None:
        """Create the engine and make sure the documents table exists."""
        if self.engine is not None:
            return
        self.engine = create_engine(self.db_url, **self._engine_options())
        with self.get_connection() as conn:
            conn.execute(text(SCHEMA))
        logger.info("Document store ready at %s", make_url(self.db_url).render_as_string(hide_password=True))

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    def _engine_options(self) -> Dict[str, Any]:
        url = make_url(self.db_url)
        if url.get_backend_name() == "sqlite":
            # store calls run in worker threads
            options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}, "future": True}
            if url.database in (None, "", ":memory:"):
                options["poolclass"] = StaticPool
            return options
        return {
            "poolclass": QueuePool,
            "pool_size": config.DB_POOL_SIZE,
            "max_overflow": config.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,
            "isolation_level": "READ COMMITTED",
            "future": True,
        }

    @contextmanager
    def get_connection(self):
        """Get a database connection with automatic cleanup."""
        if self.engine is None:
            raise RuntimeError("DatabaseManager is not open")
        with self.engine.begin() as conn:
            yield conn

    def ping(self) -> None:
        with self.get_connection() as conn:
            conn.execute(text("SELECT 1"))

    def insert_document(self, path: str, record_id: str, data: Dict[str, Any]) -> None:
        with self.get_connection() as conn:
            conn.execute(
                text("INSERT INTO documents (path, id, data) VALUES (:path, :id, :data)"),
                {"path": path, "id": record_id, "data": json.dumps(data)}
            )

    def merge_document(self, path: str, record_id: str, fields: Dict[str, Any]) -> bool:
        """Merge fields into an existing document. Returns False if it does not exist."""
        with self.get_connection() as conn:
            row = conn.execute(
                text("SELECT data FROM documents WHERE path = :path AND id = :id"),
                {"path": path, "id": record_id}
            ).mappings().first()
            if not row:
                return False

            data = json.loads(row["data"])
            data.update(fields)
            conn.execute(
                text("UPDATE documents SET data = :data WHERE path = :path AND id = :id"),
                {"path": path, "id": record_id, "data": json.dumps(data)}
            )
            return True

    def delete_document(self, path: str, record_id: str) -> bool:
        with self.get_connection() as conn:
            result = conn.execute(
                text("DELETE FROM documents WHERE path = :path AND id = :id"),
                {"path": path, "id": record_id}
            )
            return result.rowcount > 0

    def fetch_collection(self, path: str) -> Dict[str, Dict[str, Any]]:
        """Fetch every document under a collection path, keyed by id."""
        with self.get_connection() as conn:
            rows = conn.execute(
                text("SELECT id, data FROM documents WHERE path = :path ORDER BY id"),
                {"path": path}
            ).mappings().all()

        documents: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            try:
                data = json.loads(row["data"])
            except ValueError:
                logger.warning("Skipping unreadable document %s/%s", path, row["id"])
                continue
            if isinstance(data, dict):
                documents[row["id"]] = data
        return documents
