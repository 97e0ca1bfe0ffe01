from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_manager.class_manager.core.catalog import catalog_from_settings
from src.class_manager.class_manager.database.bootstrap import (
    apply_schema,
    ensure_admin_user,
    list_tables,
    seed_catalog,
)


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    seed_catalog(db_config, catalog_from_settings(settings))
    ensure_admin_user(db_config, password=settings.ADMIN_PASSWORD)

    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql and seeded catalog -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
