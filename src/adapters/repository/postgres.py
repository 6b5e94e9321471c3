"""
PostgreSQL repository adapters - Implement SubmissionStore and RateLimitRepository.

This module provides the PostgreSQL implementations of the domain's
persistence ports using psycopg3 with raw SQL.

Concurrency Design - Conditional Writes:
---------------------------------------
Rate-limit records are never written with a blind UPDATE. Every write is
guarded by the version the caller read:

1. **INSERT ... ON CONFLICT DO NOTHING**: first record for a client key.
   Two concurrent first attempts race on the primary key; exactly one
   insert reports rowcount 1.

2. **UPDATE ... WHERE version = %s**: subsequent writes. Under READ
   COMMITTED a competing UPDATE waits for the row lock, then re-checks the
   WHERE clause against the committed row and matches zero rows. The loser
   re-reads and re-evaluates in the domain layer.

Application records are append-only. The UNIQUE constraint on
request_id turns a duplicate idempotency key into a no-op insert.

All psycopg errors (including pool checkout timeouts) surface as
PersistenceFailure so the domain never sees driver types.
"""

import logging
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import PersistenceFailure
from src.domain.models import ApplicationRecord, RateLimitRecord

logger = logging.getLogger(__name__)

_APPLICATION_COLUMNS = (
    "id, name, email, phone, destination_country, profession, message, created_at, request_id"
)
_RATE_LIMIT_COLUMNS = (
    "client_key, submission_count, window_started_at, last_submission_at, blocked_until, version"
)


class PostgresSubmissionStore:
    """
    Implements SubmissionStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def insert(self, record: ApplicationRecord) -> bool:
        """
        Durably insert an application record.

        The transaction is committed before returning, so a True result means
        the record survives a crash of this process.

        Returns:
            True if inserted, False if request_id was already stored
        """
        sql = f"""
            INSERT INTO applications ({_APPLICATION_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (request_id) DO NOTHING
        """
        params = (
            record.id,
            record.name,
            record.email,
            record.phone,
            record.destination_country,
            record.profession,
            record.message,
            record.created_at,
            record.request_id,
        )
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                conn.commit()
                return cursor.rowcount == 1
        except psycopg.Error as e:
            logger.error(f"Application insert failed: {e}")
            raise PersistenceFailure("Application insert failed") from e

    def find_by_request_id(self, request_id: str) -> ApplicationRecord | None:
        sql = f"SELECT {_APPLICATION_COLUMNS} FROM applications WHERE request_id = %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (request_id,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Application lookup failed: {e}")
            raise PersistenceFailure("Application lookup failed") from e

        if row is None:
            return None
        return ApplicationRecord(*row)


class PostgresRateLimitRepository:
    """
    Implements RateLimitRepository protocol via psycopg3.

    One row per client key in application_rate_limits, versioned for
    compare-and-set.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def get(self, client_key: str) -> RateLimitRecord | None:
        sql = f"SELECT {_RATE_LIMIT_COLUMNS} FROM application_rate_limits WHERE client_key = %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (client_key,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Rate limit lookup failed for {client_key}: {e}")
            raise PersistenceFailure("Rate limit lookup failed") from e

        if row is None:
            return None
        return RateLimitRecord(*row)

    def create(self, record: RateLimitRecord) -> bool:
        """
        Insert the first record for a client key.

        Returns:
            True if inserted, False if another invocation created it first
        """
        sql = f"""
            INSERT INTO application_rate_limits ({_RATE_LIMIT_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (client_key) DO NOTHING
        """
        params = (
            record.client_key,
            record.submission_count,
            record.window_started_at,
            record.last_submission_at,
            record.blocked_until,
            record.version,
        )
        return self._execute_write(sql, params, record.client_key)

    def compare_and_set(self, record: RateLimitRecord, expected_version: int) -> bool:
        """
        Conditionally replace the record for a client key.

        Returns:
            True if the stored version matched and the row was updated
        """
        sql = """
            UPDATE application_rate_limits
            SET submission_count = %s,
                window_started_at = %s,
                last_submission_at = %s,
                blocked_until = %s,
                version = %s
            WHERE client_key = %s AND version = %s
        """
        params = (
            record.submission_count,
            record.window_started_at,
            record.last_submission_at,
            record.blocked_until,
            record.version,
            record.client_key,
            expected_version,
        )
        return self._execute_write(sql, params, record.client_key)

    def _execute_write(self, sql: str, params: tuple, client_key: str) -> bool:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                conn.commit()
                # 1 if our write applied, 0 if the key/version was taken
                return cursor.rowcount == 1
        except psycopg.Error as e:
            logger.error(f"Rate limit write failed for {client_key}: {e}")
            raise PersistenceFailure("Rate limit write failed") from e


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
