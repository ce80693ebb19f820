"""
PostgreSQL repository implementation.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, List

import psycopg2
from psycopg2.extras import execute_values

from .repository import CenterDirectory, VoterRepository
from ..config import DBConfig

logger = logging.getLogger(__name__)

VOTER_COLUMNS = (
    "serial_no",
    "cr",
    "voter_no",
    "nid",
    "name",
    "father_name",
    "mother_name",
    "husband_name",
    "gender",
    "occupation",
    "date_of_birth",
    "address",
    "area",
)


class PostgresRepository(VoterRepository, CenterDirectory):
    """
    PostgreSQL storage for centers and imported voters.

    Handles:
    - Connection management
    - Schema initialization
    - Batched voter inserts, each batch in its own transaction
    """

    def __init__(self, config: DBConfig):
        """
        Initialize repository.

        Args:
            config: Database configuration
        """
        self.config = config
        self._conn = None

    def _get_connection(self):
        """Get or create database connection."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(
                    host=self.config.host,
                    port=self.config.port,
                    dbname=self.config.name,
                    user=self.config.user,
                    password=self.config.password,
                    sslmode=self.config.ssl_mode,
                    options=f"-c search_path={self.config.schema}",
                )
                self._conn.autocommit = False
            except Exception as e:
                logger.error(f"Failed to connect to PostgreSQL: {e}")
                raise
        return self._conn

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()

    def init_db(self):
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS centers (
                        id TEXT PRIMARY KEY,
                        owner_id TEXT NOT NULL,
                        name TEXT,
                        voter_count INTEGER DEFAULT 0,
                        created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                        updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
                    );
                """)

                cur.execute("""
                    CREATE TABLE IF NOT EXISTS voters (
                        id TEXT PRIMARY KEY,
                        center_id TEXT NOT NULL REFERENCES centers(id),
                        created_by TEXT NOT NULL,
                        serial_no INTEGER,
                        cr TEXT,
                        voter_no TEXT,
                        nid TEXT,
                        name TEXT NOT NULL,

                        -- Relation fields
                        father_name TEXT,
                        mother_name TEXT,
                        husband_name TEXT,

                        gender TEXT,
                        occupation TEXT,
                        date_of_birth TEXT,
                        address TEXT,
                        area TEXT,
                        created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
                    );
                """)

                cur.execute("CREATE INDEX IF NOT EXISTS idx_voters_center_id ON voters(center_id);")
                cur.execute("CREATE INDEX IF NOT EXISTS idx_voters_voter_no ON voters(voter_no);")
                cur.execute("CREATE INDEX IF NOT EXISTS idx_voters_nid ON voters(nid);")

            conn.commit()
            logger.info("Database schema initialized")
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to initialize database: {e}")
            raise

    def ensure_center(self, center_id: str, owner_id: str, name: str = "") -> None:
        """Create the center if it does not exist yet (CLI imports)."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    "INSERT INTO centers (id, owner_id, name) VALUES (%s, %s, %s) ON CONFLICT (id) DO NOTHING",
                    (center_id, owner_id, name),
                )
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def is_owned_by(self, center_id: str, owner_id: str) -> bool:
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 FROM centers WHERE id = %s AND owner_id = %s", (center_id, owner_id))
                found = cur.fetchone() is not None
            conn.commit()
            return found
        except Exception:
            conn.rollback()
            raise

    def insert_batch(self, center_id: str, owner_id: str, docs: List[dict[str, Any]]) -> int:
        """Insert one batch; a failure rolls back only this batch."""
        query = f"""
            INSERT INTO voters (id, center_id, created_by, {", ".join(VOTER_COLUMNS)})
            VALUES %s
        """
        values = [
            (str(uuid.uuid4()), center_id, owner_id, *(doc.get(col) for col in VOTER_COLUMNS))
            for doc in docs
        ]

        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                execute_values(cur, query, values)
            conn.commit()
            return len(values)
        except Exception as e:
            conn.rollback()
            logger.error(f"Voter batch insert failed ({len(values)} rows): {e}")
            raise

    def refresh_voter_count(self, center_id: str) -> int:
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE centers
                    SET voter_count = (SELECT COUNT(*) FROM voters WHERE center_id = %s),
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = %s
                    RETURNING voter_count
                    """,
                    (center_id, center_id),
                )
                row = cur.fetchone()
            conn.commit()
            return row[0] if row else 0
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to refresh voter count for center {center_id}: {e}")
            raise
