from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from logging.handlers import RotatingFileHandler
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .analytics.controller import register as register_analytics
from .attendance.controller import register as register_attendance
from .clubs.controller import register as register_clubs
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .events.controller import register as register_events
from .memberships.controller import register as register_memberships
from .sessions.controller import register as register_sessions
from .users.controller import register as register_users

logger = logging.getLogger("cca_hub")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: str, log_file: Optional[str], debug: bool) -> None:
    logger.setLevel(level.upper())
    if logger.handlers:
        return

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream)

    # Rotating file log in non-debug environments
    if log_file and not debug:
        handler = RotatingFileHandler(log_file, maxBytes=1_048_576, backupCount=10)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(logging.INFO)
        logger.addHandler(handler)


def create_app(container: Optional[Container] = None) -> Flask:
    """App factory. Pass ``container`` to wire in pre-built repositories (tests)."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=7)

    configure_logging(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        log_file=getattr(settings, "LOG_FILE", None),
        debug=app.config["DEBUG"],
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)
            logger.info("demo users ready")

        container = build_container(
            db_config=db_config,
            mongo_uri=getattr(settings, "MONGO_URI"),
            mongo_db=getattr(settings, "MONGO_DB"),
        )

    register_users(app, container)
    register_clubs(app, container)
    register_memberships(app, container)
    register_sessions(app, container)
    register_events(app, container)
    register_attendance(app, container)
    register_analytics(app, container)

    return app
