from flask_jwt_extended import get_jwt_identity

from safecity.extensions import db
from safecity.models.user import User
from safecity.utils.errors import unauthorized


def current_user_id() -> int:
    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError):
        raise unauthorized("Invalid token")


def require_current_user() -> User:
    """Resolve the bearer token to a stored user. Call inside @jwt_required()."""
    user: User | None = db.session.get(User, current_user_id())
    if not user:
        raise unauthorized("User not found")
    return user


def optional_current_user() -> User | None:
    """Same as require_current_user for @jwt_required(optional=True) routes."""
    if get_jwt_identity() is None:
        return None
    return require_current_user()
