from flask import current_app
from flask_jwt_extended import create_access_token

from safecity.extensions import bcrypt
from safecity.services import user_service
from safecity.utils.errors import unauthorized


def issue_token(user) -> str:
    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role.value},
    )


def authenticate(email: str, password: str) -> dict:
    user = user_service.find_user_by_email(email)

    if not user:
        raise unauthorized("Invalid credentials")

    try:
        password_ok = bcrypt.check_password_hash(user.password_hash or "", password)
    except (ValueError, TypeError):
        # A corrupt stored hash must not turn into a 500
        raise unauthorized("Invalid credentials")

    if not password_ok:
        current_app.logger.info("[auth] failed login user=%s", user.id)
        raise unauthorized("Invalid credentials")

    return {
        "access_token": issue_token(user),
        "user": user_service.user_to_dict(user),
    }
