from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import ProductionConfig, check_production_secrets, get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from services.sessions import build_session_issuer

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Secure Auth API",
        "version": "1.0.0",
        "description": "Password and Google/GitHub sign-in with short-lived access tokens and revocable refresh tokens.",
    },
    "basePath": "/",  # blueprints are mounted under /api
    "schemes": ["http"],
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
    Binds the storage singleton to the configured database and attaches
    the session issuer under app.extensions["session_issuer"].
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    config_cls = get_config(config_name)
    app.config.from_object(config_cls)
    if config_cls is ProductionConfig:
        check_production_secrets(app.config)

    # the frontend sends the refresh cookie cross-origin
    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"].split(",")}},
        supports_credentials=True,
    )

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    storage.reload(app.config["DATABASE_URL"])
    app.extensions["session_issuer"] = build_session_issuer(app.config, storage)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .oauth import bp as oauth_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(oauth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api/user")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Secure Auth API",
            "docs": "/apidocs/",
            "health": "/api/health",
        }, 200

    return app
