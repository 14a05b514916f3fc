from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.enums import CheckInRepeatPolicy
from .database.bootstrap import apply_schema, ensure_demo_admin, list_tables
from .employees.controller import register as register_employees
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_admin(db_config)

        container = build_container(
            db_config=db_config,
            repeat_policy=CheckInRepeatPolicy(getattr(settings, "CHECKIN_REPEAT_POLICY", "reopen")),
            allow_self_approval=bool(getattr(settings, "ALLOW_SELF_APPROVAL", False)),
        )

    register_error_handlers(app)
    register_employees(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_payroll(app, container)

    return app
