import sqlite3
import time

from flask import Flask, g, request
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.exceptions import HTTPException

from portfolio.config import Config
from portfolio.utils.logger import get_logger, set_level

# Initialize extensions
cors = CORS()
db = SQLAlchemy()

logger = get_logger(__name__)


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def register_error_handlers(app):
    from portfolio.errors import APIError, error_response, internal_error_response

    @app.errorhandler(APIError)
    def handle_api_error(exc):
        return error_response(exc.status, exc.message, exc.error_code, exc.details)

    @app.errorhandler(404)
    def handle_not_found(exc):
        return error_response(404, 'Route not found', 'NOT_FOUND')

    @app.errorhandler(405)
    def handle_method_not_allowed(exc):
        return error_response(405, 'Method not allowed', 'METHOD_NOT_ALLOWED')

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return error_response(exc.code, exc.description)

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return internal_error_response(exc)


def register_request_logging(app):
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get('request_started')
        elapsed = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info(
            "%s %s %s %s - %.1f ms",
            request.method, request.path, response.status_code,
            response.content_length or 0, elapsed,
        )
        return response


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    set_level(app.config['LOG_LEVEL'])

    # Allow CORS for frontend
    cors.init_app(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)
    db.init_app(app)

    # Import all models before creating tables
    from portfolio import models  # noqa: F401

    with app.app_context():
        db.create_all()

    # Import and register blueprints here
    from portfolio.routes import api_bp
    from portfolio.routes.site import FrontendPathConverter, site_bp
    app.url_map.converters['frontend'] = FrontendPathConverter
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(site_bp)

    register_error_handlers(app)
    register_request_logging(app)

    logger.info("App ready (database: %s)", app.config['SQLALCHEMY_DATABASE_URI'].split('@')[-1])
    return app
