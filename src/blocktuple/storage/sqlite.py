"""SQLite database writer for validator pools and run-length statistics."""

import sqlite3
import time
from pathlib import Path
from typing import Optional, Union

DEFAULT_DB_PATH = Path(__file__).parent.parent.parent.parent / "blocktuple_results.db"

SCOPE_HORIZON = "horizon"
SCOPE_TARGET_EPOCH = "target_epoch"

# Schema definitions
SCHEMA = """
CREATE TABLE IF NOT EXISTS validator_pools (
    ts REAL,
    pool_id TEXT,
    network_penetration REAL
);

CREATE TABLE IF NOT EXISTS pmf (
    ts REAL,
    pool_id TEXT,
    run_length INTEGER,
    exact_pmf REAL,
    monte_carlo_pmf REAL
);

CREATE TABLE IF NOT EXISTS run_length_stats (
    ts REAL,
    pool_id TEXT,
    scope TEXT,
    run_length INTEGER,
    median_count REAL,
    odds REAL
);

CREATE TABLE IF NOT EXISTS target_slot_hits (
    ts REAL,
    pool_id TEXT,
    target_epoch INTEGER,
    target_slot TEXT,
    median_hits REAL
);

CREATE TABLE IF NOT EXISTS epoch_projections (
    ts REAL,
    pool_id TEXT,
    epoch INTEGER,
    probability REAL
);

CREATE INDEX IF NOT EXISTS idx_pools_ts ON validator_pools(ts);
CREATE INDEX IF NOT EXISTS idx_pmf_pool ON pmf(pool_id);
CREATE INDEX IF NOT EXISTS idx_stats_pool ON run_length_stats(pool_id, scope);
CREATE INDEX IF NOT EXISTS idx_hits_pool ON target_slot_hits(pool_id);
CREATE INDEX IF NOT EXISTS idx_projections_pool ON epoch_projections(pool_id);
"""

TABLES = ["validator_pools", "pmf", "run_length_stats", "target_slot_hits", "epoch_projections"]


class SQLiteWriter:
    """Writer for run-length statistics to SQLite."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """Initialize SQLite writer.

        Args:
            db_path: Path to SQLite database file. Defaults to blocktuple_results.db in project root.
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._conn: Optional[sqlite3.Connection] = None
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create database and tables if they don't exist."""
        conn = self._get_connection()
        conn.executescript(SCHEMA)
        conn.commit()

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "SQLiteWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Validator Pools ---

    def write_pools(self, pools: list, ts: Optional[float] = None) -> None:
        """Write a validator pool snapshot.

        Args:
            pools: ValidatorPool objects.
            ts: Timestamp (defaults to current time).
        """
        ts = ts or time.time()
        conn = self._get_connection()
        conn.executemany(
            "INSERT INTO validator_pools (ts, pool_id, network_penetration) VALUES (?, ?, ?)",
            [(ts, pool.pool_id, pool.network_penetration) for pool in pools],
        )
        conn.commit()

    # --- PMF ---

    def write_pmf(self, pool_id: str, rows: list[list], ts: Optional[float] = None) -> None:
        """Write a PMF table.

        Args:
            pool_id: Pool the probability was taken from.
            rows: Rows of (run length, exact PMF, Monte Carlo PMF).
            ts: Timestamp (defaults to current time).
        """
        ts = ts or time.time()
        conn = self._get_connection()
        conn.executemany(
            """
            INSERT INTO pmf (ts, pool_id, run_length, exact_pmf, monte_carlo_pmf)
            VALUES (?, ?, ?, ?, ?)
            """,
            [(ts, pool_id, int(k), exact, mc) for k, exact, mc in rows],
        )
        conn.commit()

    # --- Run-Length Statistics ---

    def write_run_length_stats(
        self,
        pool_id: str,
        scope: str,
        rows: list[list],
        ts: Optional[float] = None,
    ) -> None:
        """Write median tallies and odds per run length.

        Args:
            pool_id: Pool the probability was taken from.
            scope: SCOPE_HORIZON or SCOPE_TARGET_EPOCH.
            rows: Rows of (run length, median count, odds).
            ts: Timestamp (defaults to current time).
        """
        if scope not in (SCOPE_HORIZON, SCOPE_TARGET_EPOCH):
            raise ValueError(f"Unknown scope: {scope}")

        ts = ts or time.time()
        conn = self._get_connection()
        conn.executemany(
            """
            INSERT INTO run_length_stats (ts, pool_id, scope, run_length, median_count, odds)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [(ts, pool_id, scope, int(k), median, odds) for k, median, odds in rows],
        )
        conn.commit()

    def write_target_slot_hits(
        self,
        pool_id: str,
        target_epoch: int,
        target_slot: Union[int, str],
        median_hits: float,
        ts: Optional[float] = None,
    ) -> None:
        """Write the median target-slot hit statistic."""
        conn = self._get_connection()
        conn.execute(
            """
            INSERT INTO target_slot_hits (ts, pool_id, target_epoch, target_slot, median_hits)
            VALUES (?, ?, ?, ?, ?)
            """,
            (ts or time.time(), pool_id, target_epoch, str(target_slot), median_hits),
        )
        conn.commit()

    # --- Epoch Projections ---

    def write_projection(self, pool_id: str, rows: list[list], ts: Optional[float] = None) -> None:
        """Write per-epoch probability terms as rows of (epoch, probability)."""
        ts = ts or time.time()
        conn = self._get_connection()
        conn.executemany(
            "INSERT INTO epoch_projections (ts, pool_id, epoch, probability) VALUES (?, ?, ?, ?)",
            [(ts, pool_id, int(epoch), probability) for epoch, probability in rows],
        )
        conn.commit()

    # --- Query Methods ---

    def get_pools(self, ts: Optional[float] = None) -> list[dict]:
        """Query the latest (or a specific) pool snapshot."""
        conn = self._get_connection()
        if ts is None:
            row = conn.execute("SELECT MAX(ts) AS ts FROM validator_pools").fetchone()
            ts = row["ts"]
        cursor = conn.execute(
            "SELECT * FROM validator_pools WHERE ts = ? ORDER BY rowid", (ts,)
        )
        return [dict(row) for row in cursor.fetchall()]

    def get_pmf(self, pool_id: str) -> list[dict]:
        """Query the latest PMF table for a pool."""
        return self._latest("pmf", "pool_id = ?", [pool_id], order="run_length ASC")

    def get_run_length_stats(self, pool_id: str, scope: str = SCOPE_HORIZON) -> list[dict]:
        """Query the latest run-length statistics for a pool and scope."""
        return self._latest(
            "run_length_stats", "pool_id = ? AND scope = ?", [pool_id, scope],
            order="run_length ASC",
        )

    def get_target_slot_hits(self, pool_id: str, limit: int = 1000) -> list[dict]:
        """Query target-slot hit statistics, newest first."""
        conn = self._get_connection()
        cursor = conn.execute(
            f"SELECT * FROM target_slot_hits WHERE pool_id = ? ORDER BY ts DESC LIMIT {limit}",
            (pool_id,),
        )
        return [dict(row) for row in cursor.fetchall()]

    def get_projection(self, pool_id: str) -> list[dict]:
        """Query the latest epoch projection for a pool."""
        return self._latest("epoch_projections", "pool_id = ?", [pool_id], order="epoch ASC")

    def _latest(self, table: str, where: str, params: list, order: str) -> list[dict]:
        conn = self._get_connection()
        query = (
            f"SELECT * FROM {table} WHERE {where} "
            f"AND ts = (SELECT MAX(ts) FROM {table} WHERE {where}) "
            f"ORDER BY {order}"
        )
        cursor = conn.execute(query, params + params)
        return [dict(row) for row in cursor.fetchall()]

    def get_stats(self) -> dict:
        """Get database statistics."""
        conn = self._get_connection()

        stats = {}
        for table in TABLES:
            cursor = conn.execute(f"SELECT COUNT(*) as count FROM {table}")
            stats[table] = cursor.fetchone()["count"]

        return stats
