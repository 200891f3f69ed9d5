import click
from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from services import build_services
from services.settings import AuthSettings
from utils.security import configure_hasher

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Session Auth API",
        "version": "1.0.0",
        "description": "Login, rotating refresh tokens, account lockout and multi-device session management.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    The cleanup scheduler is not started here; the process entrypoint owns it.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))

    configure_hasher(app.config.get("ARGON2_TIME_COST"), app.config.get("ARGON2_MEMORY_COST"))
    app.extensions["auth_services"] = build_services(
        storage,
        AuthSettings.from_config(app.config),
        daily_interval=app.config["CLEANUP_DAILY_INTERVAL"],
        hourly_interval=app.config["CLEANUP_HOURLY_INTERVAL"],
    )

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .auth import bp as auth_bp
    from .sessions import bp as sessions_bp
    from .admin import bp as admin_bp

    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(sessions_bp, url_prefix="/api/v1/auth/sessions")
    app.register_blueprint(admin_bp, url_prefix="/api/v1/admin")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Run one session cleanup sweep now."""
        report = app.extensions["auth_services"].cleanup.run_once("cli")
        if report is None:
            click.echo("Session cleanup failed; see log")
        else:
            click.echo(f"Removed {report.expired} expired and {report.revoked} revoked sessions")

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Session Auth API",
            "docs": "/apidocs/",
        }, 200

    return app
