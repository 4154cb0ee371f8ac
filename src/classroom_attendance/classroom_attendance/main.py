from __future__ import annotations

import importlib
import logging
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .core.exceptions import AuthenticationError, NotFoundError, PersistenceError, ValidationError
from .courses.controller import register as register_courses
from .reports.controller import register as register_reports
from .store.backend import StorageBackend
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    def _fail(e: Exception, status: int):
        return jsonify({"success": False, "message": str(e)}), status

    app.register_error_handler(ValidationError, lambda e: _fail(e, 400))
    app.register_error_handler(AuthenticationError, lambda e: _fail(e, 401))
    app.register_error_handler(NotFoundError, lambda e: _fail(e, 404))

    @app.errorhandler(PersistenceError)
    def persistence_failed(e: PersistenceError):
        logger.error("Persistence failure: %s", e)
        return (
            jsonify({"success": False, "message": "Changes were applied but could not be saved; data may be lost on restart"}),
            503,
        )


def create_app(*, settings: Optional[Any] = None, backend: Optional[StorageBackend] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    if settings is None:
        settings_module = get_settings_module()
        settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.debug("settings=%s storage=%s", getattr(settings, "__name__", settings), getattr(settings, "STORAGE_BACKEND", "memory"))

    container = build_container(settings=settings, backend=backend)
    container.store.init()
    app.extensions["classroom_attendance"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_courses(app, container)
    register_attendance(app, container)
    register_reports(app, container)

    return app
