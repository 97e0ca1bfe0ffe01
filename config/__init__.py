"""Settings modules, picked by the ``APP_ENV`` environment variable."""

import os

_MODULES = {
    "development": "config.development",
    "dev": "config.development",
    "testing": "config.testing",
    "test": "config.testing",
    "production": "config.production",
    "prod": "config.production",
}


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").strip().lower()
    # Unknown values fall back to development
    return _MODULES.get(env, "config.development")
