from flask import Blueprint, Response, request
from flask_jwt_extended import jwt_required

from safecity.schemas.incident_schemas import IncidentCreateSchema, IncidentFilterSchema
from safecity.services import export_service, incident_service
from safecity.utils import permissions
from safecity.utils.responses import success_response
from safecity.utils.security import optional_current_user, require_current_user

bp = Blueprint("incidents", __name__)

incident_create_schema = IncidentCreateSchema()
incident_filter_schema = IncidentFilterSchema()


def _page_args() -> tuple:
    page = request.args.get("page", 1)
    page_size = request.args.get("pageSize") or request.args.get("page_size")
    return page, page_size


@bp.get("")
def list_incidents():
    """
    Public listing. Filters: status, category, startDate, endDate.
    Pagination: page, pageSize (capped by MAX_PAGE_SIZE).
    """
    filters = incident_filter_schema.load(request.args)
    page, page_size = _page_args()
    data = incident_service.list_incidents(filters, page=page, page_size=page_size)
    return success_response(data=data)


@bp.post("")
@jwt_required()
def create_incident():
    user = require_current_user()
    data = incident_create_schema.load(request.get_json(silent=True) or {})
    incident = incident_service.create_incident(user.id, data)
    return success_response(
        data=incident_service.incident_to_dict(incident),
        message="Incident created",
        status_code=201,
    )


@bp.get("/search")
def search_incidents():
    query = request.args.get("query", request.args.get("q"))
    items = incident_service.search_incidents(query, limit=request.args.get("limit"))
    return success_response(data={"items": items, "count": len(items)})


@bp.get("/trending")
def trending_incidents():
    items = incident_service.list_trending(limit=request.args.get("limit"))
    return success_response(data=items)


@bp.get("/mine")
@jwt_required()
def my_incidents():
    user = require_current_user()
    filters = incident_filter_schema.load(request.args)
    page, page_size = _page_args()
    data = incident_service.list_user_incidents(user.id, filters, page=page, page_size=page_size)
    return success_response(data=data)


@bp.get("/export")
@jwt_required()
def export_incidents():
    user = require_current_user()
    permissions.ensure_can_export(user)

    filters = incident_filter_schema.load(request.args)
    payload, content_type, filename = export_service.export_incidents(request.args.get("format"), filters)

    return Response(
        payload,
        status=200,
        content_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@bp.get("/<int:incident_id>")
def get_incident(incident_id: int):
    data = incident_service.get_incident(incident_id)
    return success_response(data=data)


@bp.delete("/<int:incident_id>")
@jwt_required()
def delete_incident(incident_id: int):
    user = require_current_user()
    data = incident_service.delete_incident(incident_id, user)
    return success_response(data=data, message="Incident deleted")


@bp.patch("/<int:incident_id>/status")
@jwt_required()
def update_status(incident_id: int):
    user = require_current_user()
    payload = request.get_json(silent=True) or {}
    incident = incident_service.update_status_with_permission(incident_id, user, payload.get("status"))
    return success_response(data=incident_service.incident_to_dict(incident), message="Status updated")


@bp.get("/<int:incident_id>/history")
def status_history(incident_id: int):
    data = incident_service.list_history(incident_id)
    return success_response(data=data)


@bp.post("/<int:incident_id>/upvote")
@jwt_required()
def toggle_upvote(incident_id: int):
    user = require_current_user()
    data = incident_service.toggle_upvote(incident_id, user.id)
    return success_response(data=data)


@bp.get("/<int:incident_id>/vote-status")
@jwt_required(optional=True)
def vote_status(incident_id: int):
    user = optional_current_user()
    incident_service.require_incident(incident_id)
    voted = incident_service.has_voted(incident_id, user.id if user else None)
    return success_response(data={"has_voted": voted})
