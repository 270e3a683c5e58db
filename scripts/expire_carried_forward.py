"""Move carried-forward leave past its expiry date into the expired balance.

Safe to schedule daily; a second run on the same day changes nothing.
"""

from __future__ import annotations

from hris_engine.common.logging_utils import setup_logging
from hris_engine.config import load_settings
from hris_engine.container import build_container
from hris_engine.database.bootstrap import SCHEMA_PATH, apply_schema


def main() -> None:
    settings = load_settings()
    setup_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(container.conn, schema_path=SCHEMA_PATH)
    count = container.leave_balance_engine.expire_carried_forward()
    print(f"OK: Expired carried-forward leave on {count} balance(s)")


if __name__ == "__main__":
    main()
