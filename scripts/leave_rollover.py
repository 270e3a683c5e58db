"""Year-end leave rollover.

Usage: python scripts/leave_rollover.py [FROM_YEAR]

FROM_YEAR defaults to last year. Every active employee gets a balance row for
FROM_YEAR + 1 carrying up to half of their quota.
"""

from __future__ import annotations

import logging
import sys

from hris_engine.common.datetime_utils import now_local
from hris_engine.common.logging_utils import setup_logging
from hris_engine.config import load_settings
from hris_engine.container import build_container
from hris_engine.database.bootstrap import SCHEMA_PATH, apply_schema
from hris_engine.core.exceptions import DomainError

logger = logging.getLogger("hris_engine.scripts.leave_rollover")


def main() -> None:
    settings = load_settings()
    setup_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    from_year = int(sys.argv[1]) if len(sys.argv) > 1 else now_local().year - 1
    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(container.conn, schema_path=SCHEMA_PATH)

    done, failed = 0, 0
    for employee in container.employees_repo.list_active():
        try:
            container.leave_balance_engine.rollover_to_next_year(employee.employee_id, from_year)
            done += 1
        except DomainError:
            failed += 1
            logger.exception("Rollover failed for employee %s", employee.employee_id)

    print(f"OK: Rolled over {from_year} -> {from_year + 1} (employees={done}, failed={failed})")
    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
