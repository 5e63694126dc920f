# backend/granaflux/__init__.py
import logging

from flask import Flask, request

from .config import Config
from .extensions import db, migrate

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        # Must land before db.init_app: the engine is created from this config
        app.config.update(overrides)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.companies import companies_bp
    from .routes.categories import categories_bp
    from .routes.ledger import revenues_bp, expenses_bp
    from .routes.products import products_bp
    from .routes.clients import clients_bp
    from .routes.sales import sales_bp
    from .routes.commissions import commissions_bp
    from .routes.tasks import tasks_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(companies_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(revenues_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(commissions_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(reports_bp)

    from .errors import register_error_handlers
    register_error_handlers(app)

    @app.after_request
    def add_response_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {app.config.get("FRONTEND_URL")}
        if app.config.get("ENV") != "production":
            allowed_origins.update({"http://localhost:5173", "http://127.0.0.1:5173"})
        if origin and origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"

        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
