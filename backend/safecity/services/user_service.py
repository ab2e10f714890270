from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from safecity.extensions import db, bcrypt
from safecity.models.enums import Role
from safecity.models.user import User
from safecity.utils.dates import iso
from safecity.utils.errors import conflict, not_found


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def require_user(user_id: int) -> User:
    user = get_user(user_id)
    if not user:
        raise not_found("User not found", {"user_id": user_id})
    return user


def find_user_by_email(email: str) -> Optional[User]:
    return User.query.filter_by(email=(email or "").lower().strip()).first()


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode("utf-8")


def create_user(data: dict, role: Role = Role.CITIZEN) -> User:
    email = data["email"].lower().strip()

    if find_user_by_email(email):
        raise conflict("Email already registered", {"email": email})

    user = User(
        first_name=data["first_name"].strip(),
        last_name=data["last_name"].strip(),
        email=email,
        password_hash=hash_password(data["password"]),
        role=role,
    )
    db.session.add(user)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise conflict("Email already registered", {"email": email})

    current_app.logger.info("[auth] registered user id=%s role=%s", user.id, user.role.value)
    return user


def ensure_admin(email: str, password: str) -> User:
    """Create the admin account, or promote and re-key an existing one."""
    user = find_user_by_email(email)
    if user is None:
        return create_user(
            {"email": email, "password": password, "first_name": "System", "last_name": "Admin"},
            role=Role.ADMIN,
        )

    user.role = Role.ADMIN
    user.password_hash = hash_password(password)
    db.session.commit()
    return user


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "role": user.role.value,
        "created_at": iso(user.created_at),
    }
