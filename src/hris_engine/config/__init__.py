import importlib
import os
from types import ModuleType

from dotenv import load_dotenv


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown falls back to development
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "hris_engine.config.production"

    if env in {"test", "testing"}:
        return "hris_engine.config.testing"

    return "hris_engine.config.development"


def load_settings() -> ModuleType:
    """Load ``.env`` (without overriding real env vars) and import the settings module."""
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())
