"""
PostgreSQL store implementation.
"""

from __future__ import annotations

from .sql_store import SqlAlchemyStore


class PostgresStore(SqlAlchemyStore):
    """
    PostgreSQL-backed plugin tables.

    Upserts use INSERT ... ON CONFLICT so concurrent writers to different
    keys only ever lock their own rows.

    TLS is whatever the URL asks for (e.g. `?sslmode=require`); with no
    sslmode, libpq uses its default of `prefer`. Certificates are not
    relaxed here.

    Requires: sqlalchemy and psycopg2-binary
    """

    name = "postgres"

    @staticmethod
    def normalize_url(url: str) -> str:
        # Heroku-style URLs; SQLAlchemy 1.4+ only accepts "postgresql".
        if url.startswith("postgres://"):
            return "postgresql://" + url[len("postgres://") :]
        return url

    def quote(self, identifier: str) -> str:
        return f'"{identifier}"'

    def create_table_sql(self, table: str) -> str:
        return f"""
            CREATE TABLE IF NOT EXISTS "{table}" (
                key   TEXT   NOT NULL PRIMARY KEY,
                value TEXT,
                ts    BIGINT NOT NULL DEFAULT 0
            )
        """

    def upsert_sql(self, table: str) -> str:
        return f"""
            INSERT INTO "{table}" (key, value, ts)
            VALUES (:key, :value, :ts)
            ON CONFLICT (key) DO UPDATE SET
                value = EXCLUDED.value,
                ts = EXCLUDED.ts
        """
