from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .container import build_container
from .core.catalog import catalog_from_settings
from .core.constants import DEFAULT_SESSION_DAYS, DEFAULT_TOKEN_MAX_ATTEMPTS
from .database.bootstrap import apply_schema, ensure_admin_user, ensure_demo_students, list_tables, seed_catalog
from .exams.controller import register as register_exams
from .payments.controller import register as register_payments
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["PUBLIC_BASE_URL"] = getattr(settings, "PUBLIC_BASE_URL", "")
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    catalog = catalog_from_settings(settings)
    default_password = getattr(settings, "DEFAULT_STUDENT_PASSWORD")

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        seed_catalog(db_config, catalog)
        ensure_admin_user(db_config, password=getattr(settings, "ADMIN_PASSWORD"))
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        catalog=catalog,
        default_student_password=default_password,
        token_max_attempts=int(getattr(settings, "TOKEN_MAX_ATTEMPTS", DEFAULT_TOKEN_MAX_ATTEMPTS)),
    )

    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        created = ensure_demo_students(container.student_service)
        logger.info("demo seed ready (new students=%d)", created)

    register_users(app, container)
    register_students(app, container)
    register_classes(app, container)
    register_attendance(app, container)
    register_payments(app, container)
    register_exams(app, container)

    return app
