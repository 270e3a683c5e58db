"""Settings shared by every environment module."""

import os

from ..core.constants import (
    CARRY_FORWARD_EXPIRY_MONTHS as _EXPIRY_MONTHS,
    CURRENCY_DECIMAL_PLACES as _DECIMAL_PLACES,
    DEFAULT_ANNUAL_QUOTA as _ANNUAL_QUOTA,
    MAX_CHAIN_DEPTH as _CHAIN_DEPTH,
)


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def db_config_from_env(*, default_password: str = "", default_database: str = "hris_db") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", default_database),
    }


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = env_flag("LOG_JSON", "0")

DEFAULT_ANNUAL_QUOTA = int(os.getenv("DEFAULT_ANNUAL_QUOTA", str(_ANNUAL_QUOTA)))
CARRY_FORWARD_EXPIRY_MONTHS = int(os.getenv("CARRY_FORWARD_EXPIRY_MONTHS", str(_EXPIRY_MONTHS)))
MAX_CHAIN_DEPTH = int(os.getenv("MAX_CHAIN_DEPTH", str(_CHAIN_DEPTH)))
CURRENCY_DECIMAL_PLACES = _DECIMAL_PLACES

# Count only working (non-holiday) days when sizing a leave request
LEAVE_EXCLUDE_HOLIDAYS = env_flag("LEAVE_EXCLUDE_HOLIDAYS", "0")

# Roles allowed to act at the HR level of two-level approvals
HR_ROLES = tuple(r.strip() for r in os.getenv("HR_ROLES", "hr,admin").split(",") if r.strip())
