from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_manager.class_manager.container import build_container
from src.class_manager.class_manager.core.catalog import catalog_from_settings
from src.class_manager.class_manager.database.bootstrap import ensure_demo_students


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    container = build_container(
        db_config=db_config,
        catalog=catalog_from_settings(settings),
        default_student_password=settings.DEFAULT_STUDENT_PASSWORD,
    )
    created = ensure_demo_students(container.student_service)

    print(
        f"OK: Seeded {created} demo student(s) -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
