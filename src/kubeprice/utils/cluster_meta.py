"""
cluster_meta.py
Durable cluster id -> cluster name records with get-or-create semantics.

Every operation opens its own SQLite connection and closes it before returning.
Nothing spans a lookup and the insert that may follow it, so two processes
registering the same new cluster can race; the loser gets a ClusterMetaError
from the primary-key violation and should look the record up again.
"""

import logging
import sqlite3
from contextlib import closing
from typing import Optional, Tuple

from kubeprice.cloud.errors import ClusterMetaError
from kubeprice.utils.settings import Settings

logger = logging.getLogger(__name__)

CREATE_TABLE_STATEMENTS = [
    '''
    CREATE TABLE IF NOT EXISTS names (
        cluster_id VARCHAR(255) NOT NULL,
        cluster_name VARCHAR(255) NULL,
        PRIMARY KEY (cluster_id)
    )
    ''',
]


class ClusterMetaStore:
    """Cluster metadata persisted in the `names` table."""

    def __init__(self, address: str):
        self.address = address

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClusterMetaStore":
        return cls(settings.sql_address)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.address)

    def get(self, cluster_id: str) -> Tuple[str, str]:
        """Return (cluster_id, cluster_name), or ("", "") when nothing is stored."""
        query = 'SELECT cluster_id, cluster_name FROM names WHERE cluster_id = ?'
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(query, (cluster_id,)).fetchone()
        except sqlite3.OperationalError as e:
            if "no such table" in str(e):
                return "", ""
            raise ClusterMetaError(f"Failed to look up cluster {cluster_id}: {e}") from e
        except sqlite3.Error as e:
            raise ClusterMetaError(f"Failed to look up cluster {cluster_id}: {e}") from e
        if row is None:
            return "", ""
        return row[0], row[1] or ""

    def create(self, cluster_id: str, cluster_name: str) -> None:
        """Insert a new record, creating the table if needed. Fails if the id exists."""
        try:
            with closing(self._connect()) as conn:
                with conn:
                    for stmt in CREATE_TABLE_STATEMENTS:
                        conn.execute(stmt)
                    conn.execute(
                        'INSERT INTO names (cluster_id, cluster_name) VALUES (?, ?)',
                        (cluster_id, cluster_name),
                    )
        except sqlite3.Error as e:
            raise ClusterMetaError(f"Failed to create cluster {cluster_id}: {e}") from e
        logger.info("Registered cluster %s as %r", cluster_id, cluster_name)

    def update(self, cluster_id: str, cluster_name: str) -> None:
        try:
            with closing(self._connect()) as conn:
                with conn:
                    conn.execute(
                        'UPDATE names SET cluster_name = ? WHERE cluster_id = ?',
                        (cluster_name, cluster_id),
                    )
        except sqlite3.Error as e:
            raise ClusterMetaError(f"Failed to update cluster {cluster_id}: {e}") from e

    def get_or_create(self, cluster_id: str, cluster_name: str) -> Tuple[str, str]:
        """
        Return the stored record for `cluster_id`, creating it with `cluster_name`
        when the lookup fails or finds nothing. An existing name is never
        overwritten.
        """
        found_id: Optional[str] = None
        found_name = ""
        try:
            found_id, found_name = self.get(cluster_id)
        except ClusterMetaError as e:
            logger.warning("Cluster lookup failed, attempting create: %s", e)

        if not found_id:
            self.create(cluster_id, cluster_name)
            return cluster_id, cluster_name
        return found_id, found_name
