from .base import *  # noqa: F401,F403
from .base import db_config_from_env, env_flag

DB_CONFIG = db_config_from_env(default_database="hris_test_db")

TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
