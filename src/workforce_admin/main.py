from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .banking.controller import register as register_banking
from .clients.controller import register as register_clients
from .common.logging_setup import setup_logging
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_DEDUCTION_RATE, DEFAULT_OVERTIME_MULTIPLIER, DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, ensure_demo_admin, list_tables, seed_role_permissions
from .errors import register_error_handlers
from .notifications.controller import register as register_notifications
from .payroll.controller import register as register_payroll
from .permissions.controller import register as register_permissions
from .profiles.controller import register as register_profiles
from .projects.controller import register as register_projects
from .reports.controller import register as register_reports
from .rosters.controller import register as register_rosters
from .web.auth import CONTAINER_KEY
from .working_hours.controller import register as register_working_hours

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    A prebuilt container skips database setup entirely (used by the tests).
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

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
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_admin(db_config)
            seed_role_permissions(db_config)
            logger.info("Demo admin and role permissions seeded")

        container = build_container(
            db_config=db_config,
            deduction_rate=getattr(settings, "DEFAULT_DEDUCTION_RATE", DEFAULT_DEDUCTION_RATE),
            overtime_multiplier=getattr(settings, "OVERTIME_MULTIPLIER", DEFAULT_OVERTIME_MULTIPLIER),
        )

    app.extensions[CONTAINER_KEY] = container
    register_error_handlers(app)

    register_profiles(app, container)
    register_permissions(app, container)
    register_clients(app, container)
    register_projects(app, container)
    register_working_hours(app, container)
    register_rosters(app, container)
    register_payroll(app, container)
    register_banking(app, container)
    register_notifications(app, container)
    register_reports(app, container)

    @app.route("/api/health", endpoint="health")
    def health():
        return {"success": True, "status": "ok"}

    return app
