from .auth_routes import bp as auth_bp
from .incident_routes import bp as incidents_bp
from .comment_routes import bp as comments_bp
from .photo_routes import bp as photos_bp
from .admin_routes import bp as admin_bp

__all__ = [
    "auth_bp",
    "incidents_bp",
    "comments_bp",
    "photos_bp",
    "admin_bp",
]
