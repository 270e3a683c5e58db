from .base import *  # noqa: F401,F403
from .base import db_config_from_env, env_flag

DB_CONFIG = db_config_from_env(default_password="", default_database="hris_db")

LOG_LEVEL = "DEBUG"

# If enabled, scripts apply database/schema.sql before running (CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
