from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from safecity.schemas.comment_schemas import CommentCreateSchema
from safecity.services import comment_service
from safecity.utils.responses import success_response
from safecity.utils.security import require_current_user

bp = Blueprint("comments", __name__)

comment_create_schema = CommentCreateSchema()


@bp.get("/<int:incident_id>/comments")
def list_comments(incident_id: int):
    data = comment_service.list_comments(incident_id)
    return success_response(data=data)


@bp.post("/<int:incident_id>/comments")
@jwt_required()
def create_comment(incident_id: int):
    user = require_current_user()
    data = comment_create_schema.load(request.get_json(silent=True) or {})

    comment = comment_service.create_comment(
        incident_id,
        user,
        data["content"],
        parent_id=data.get("parent_id"),
    )
    return success_response(
        data=comment_service.comment_to_dict(comment),
        message="Comment created",
        status_code=201,
    )


@bp.delete("/<int:incident_id>/comments/<int:comment_id>")
@jwt_required()
def delete_comment(incident_id: int, comment_id: int):
    user = require_current_user()
    result = comment_service.delete_comment(comment_id, incident_id, user)
    return success_response(data=result, message="Comment deleted")
