import pymysql
pymysql.install_as_MySQLdb()
from flask import Flask

from .config import DevConfig
from .extensions import db, migrate, jwt, ma, bcrypt, cors
from .utils.errors import register_error_handlers, register_jwt_handlers
from .commands import register_commands
from .api import (
    auth_routes,
    incident_routes,
    comment_routes,
    photo_routes,
    admin_routes,
)


def create_app(config_class=DevConfig) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)

    # CORS only for the JSON API; origins come from CORS_ORIGINS
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or []}},
        supports_credentials=True,
    )

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    bcrypt.init_app(app)

    # Blueprints
    app.register_blueprint(auth_routes.bp, url_prefix="/api/auth")
    app.register_blueprint(incident_routes.bp, url_prefix="/api/incidents")
    app.register_blueprint(comment_routes.bp, url_prefix="/api/incidents")
    app.register_blueprint(photo_routes.bp, url_prefix="/api/photos")
    app.register_blueprint(admin_routes.bp, url_prefix="/api/admin")

    # Error handlers
    register_error_handlers(app)
    register_jwt_handlers(jwt)

    register_commands(app)

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "service": "safe-city-backend"}

    return app
