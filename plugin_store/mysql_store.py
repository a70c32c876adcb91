"""
MySQL store implementation.
"""

from __future__ import annotations

from .sql_store import SqlAlchemyStore


class MySQLStore(SqlAlchemyStore):
    """
    MySQL/MariaDB-backed plugin tables (InnoDB, utf8mb4).

    Requires: sqlalchemy and PyMySQL
    """

    name = "mysql"

    @staticmethod
    def normalize_url(url: str) -> str:
        # Plain mysql:// URLs would pull in the MySQLdb driver.
        if url.startswith("mysql://"):
            return "mysql+pymysql://" + url[len("mysql://") :]
        return url

    def quote(self, identifier: str) -> str:
        return f"`{identifier}`"

    def create_table_sql(self, table: str) -> str:
        return f"""
            CREATE TABLE IF NOT EXISTS `{table}` (
                `key`   VARCHAR(512) NOT NULL PRIMARY KEY,
                `value` LONGTEXT,
                `ts`    BIGINT NOT NULL DEFAULT 0
            ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
        """

    def upsert_sql(self, table: str) -> str:
        return f"""
            INSERT INTO `{table}` (`key`, `value`, `ts`)
            VALUES (:key, :value, :ts)
            ON DUPLICATE KEY UPDATE `value` = VALUES(`value`), `ts` = VALUES(`ts`)
        """
