from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from safecity.schemas.auth_schemas import RegisterSchema, LoginSchema
from safecity.services import user_service, auth_service
from safecity.utils.responses import success_response
from safecity.utils.security import require_current_user

bp = Blueprint("auth", __name__)


@bp.post("/register")
def register():
    data = RegisterSchema().load(request.get_json(silent=True) or {})
    user = user_service.create_user(data)
    return success_response(
        data={
            "user": user_service.user_to_dict(user),
            "access_token": auth_service.issue_token(user),
        },
        message="User registered",
        status_code=201,
    )


@bp.post("/login")
def login():
    data = LoginSchema().load(request.get_json(silent=True) or {})
    result = auth_service.authenticate(data["email"], data["password"])
    return success_response(data=result, message="Logged in")


@bp.get("/me")
@jwt_required()
def me():
    user = require_current_user()
    return success_response(data=user_service.user_to_dict(user), message="Current user")
