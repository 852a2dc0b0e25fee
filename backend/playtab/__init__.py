# backend/playtab/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def _register_blueprints(app: Flask) -> None:
    from .routes.system import system_bp
    from .routes.stations import stations_bp
    from .routes.sessions import sessions_bp
    from .routes.customers import customers_bp
    from .routes.settings import settings_bp

    for blueprint in (system_bp, stations_bp, sessions_bp, customers_bp, settings_bp):
        app.register_blueprint(blueprint)


def create_app(test_config: dict | None = None) -> Flask:
    """
    Application factory.

    test_config is applied before extensions bind, so a test can swap the
    database URI (e.g. sqlite:///:memory:) before the engine is created.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    db.init_app(app)
    migrate.init_app(app, db)

    # Models must be imported before create_all() / autogenerate sees the metadata
    from . import models  # noqa: F401

    _register_blueprints(app)

    allowed_origins = set(app.config.get("CORS_ORIGINS", ()))

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "X-Org-Id, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
        return response

    from .cli import register_commands
    register_commands(app)

    return app
