from __future__ import annotations

from hris_engine.common.logging_utils import setup_logging
from hris_engine.config import load_settings
from hris_engine.database.bootstrap import SCHEMA_PATH, apply_schema
from hris_engine.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = load_settings()
    setup_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(settings.DB_CONFIG))
    count = apply_schema(conn, schema_path=SCHEMA_PATH)
    print(f"OK: Applied schema.sql -> {conn.config.describe()} (statements={count})")


if __name__ == "__main__":
    main()
