from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from safecity.schemas.admin_schemas import AssignIncidentSchema, RoleUpdateSchema
from safecity.schemas.incident_schemas import IncidentFilterSchema
from safecity.services import admin_service, incident_service, statistics_service
from safecity.utils import permissions
from safecity.utils.responses import success_response
from safecity.utils.security import require_current_user

bp = Blueprint("admin", __name__)


@bp.get("/statistics")
@jwt_required()
def incident_statistics():
    user = require_current_user()
    permissions.ensure_can_view_statistics(user)

    dates = IncidentFilterSchema(only=("start_date", "end_date")).load(
        {
            "startDate": request.args.get("startDate"),
            "endDate": request.args.get("endDate"),
        }
    )
    data = statistics_service.get_incident_statistics(dates.get("start_date"), dates.get("end_date"))
    return success_response(data=data)


@bp.patch("/incidents/<int:incident_id>/assign")
@jwt_required()
def assign_incident(incident_id: int):
    """Hand an incident to an operator (operator_id=null unassigns)."""

    user = require_current_user()
    data = AssignIncidentSchema().load(request.get_json(silent=True) or {})
    incident = incident_service.assign_incident(incident_id, user, data["operator_id"])
    return success_response(data=incident_service.incident_to_dict(incident), message="Incident assigned")


@bp.get("/users")
@jwt_required()
def list_users():
    user = require_current_user()

    search = request.args.get("search")
    page = request.args.get("page", 1)
    per_page = request.args.get("per_page", 10)

    data = admin_service.list_users(user, search=search, page=page, per_page=per_page)
    return success_response(data=data)


@bp.patch("/users/<int:user_id>/role")
@jwt_required()
def update_user_role(user_id: int):
    user = require_current_user()
    data = RoleUpdateSchema().load(request.get_json(silent=True) or {})
    result = admin_service.update_user_role(user, user_id, data["role"])
    return success_response(data=result, message="Role updated")
