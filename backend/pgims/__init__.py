# backend/pgims/__init__.py
from flask import Flask, jsonify, request, current_app
from sqlalchemy import event
from werkzeug.exceptions import HTTPException

from .config import Config, engine_options_for
from .errors import PosError
from .extensions import db, migrate


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PosError)
    def handle_pos_error(e: PosError):
        db.session.rollback()
        if e.status_code >= 500:
            current_app.logger.warning("%s on %s %s: %s", e.code, request.method, request.path, e)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.name.lower().replace(" ", "_"), "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "internal_error", "message": "Unexpected error"}), 500


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    engine_options = engine_options_for(uri, app.config["LOCK_TIMEOUT_MS"])
    engine_options.update(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    if uri.startswith("sqlite"):
        with app.app_context():
            event.listen(db.engine, "connect", _enable_sqlite_foreign_keys)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.orders import orders_bp
    from .routes.inventory import inventory_bp
    from .routes.requisitions import requisitions_bp
    from .routes.customers import customers_bp
    from .routes.notifications import notifications_bp
    from .routes.resources import resources_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(requisitions_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(resources_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in app.config.get("CORS_ORIGINS", ()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
