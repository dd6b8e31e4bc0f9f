import logging

from flask import Flask, jsonify
from .config import get_config
from .errors import HubDeskError, StorageError
from .extensions import db, migrate, cors
from .logger import init_logging
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from dotenv import load_dotenv
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.middleware.proxy_fix import ProxyFix


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    app = Flask(__name__)

    # Load config
    # Ensure .env is loaded before reading env vars
    load_dotenv()
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    init_logging(app)

    # Honor proxy headers from Nginx for correct url_for(_external=True) scheme/host
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)  # type: ignore[assignment]

    # Init extensions
    cors.init_app(app, resources={r"/api/*": {"origins": list(app.config["CORS_ALLOW_ORIGINS"])}})
    db.init_app(app)
    migrate.init_app(app, db)

    # Make sure every model is mapped before the first query
    from . import models  # noqa: F401

    # Register blueprints (v1 API)
    from .apis.v1 import register_api
    register_api(app)

    register_error_handlers(app)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/db-check")
    def db_check():
        try:
            db.session.execute(text("SELECT 1"))
            return {"db": "ok"}
        except SQLAlchemyError as e:
            app.logger.error("Database check failed: %s", e)
            return {"db": "error", "message": str(e)}, 500

    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HubDeskError)
    def _handle_domain_error(exc: HubDeskError):
        if isinstance(exc, StorageError):
            app.logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc.__cause__ is not None)
        else:
            app.logger.warning("%s: %s", type(exc).__name__, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def _handle_too_large(exc: RequestEntityTooLarge):
        app.logger.warning("Request body over MAX_CONTENT_LENGTH")
        return jsonify({"error": "Upload too large"}), 413

    @app.errorhandler(SQLAlchemyError)
    def _handle_db_error(exc: SQLAlchemyError):
        db.session.rollback()
        logging.getLogger("hubdesk").exception("Unhandled database error")
        return jsonify({"error": "Storage temporarily unavailable"}), 502
