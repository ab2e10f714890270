from flask import Blueprint, Response, request
from flask_jwt_extended import jwt_required

from safecity.services import photo_service
from safecity.utils.errors import bad_request
from safecity.utils.responses import success_response
from safecity.utils.security import require_current_user

bp = Blueprint("photos", __name__)


@bp.post("")
@jwt_required()
def upload_photo():
    user = require_current_user()

    incident_id = request.form.get("incident_id")
    if incident_id not in (None, ""):
        try:
            incident_id = int(incident_id)
        except (TypeError, ValueError):
            raise bad_request("incident_id must be an integer", {"incident_id": incident_id})
    else:
        incident_id = None

    data = photo_service.persist_upload(request.files.get("file"), user.id, incident_id)
    return success_response(data=data, message="Photo uploaded", status_code=201)


@bp.get("/<int:photo_id>")
def get_photo(photo_id: int):
    photo = photo_service.get_photo(photo_id)
    return Response(
        photo.data,
        status=200,
        mimetype=photo.mime_type,
        headers={
            "Content-Length": str(len(photo.data or b"") or photo.size or 0),
            # photos are never edited in place
            "Cache-Control": "public, max-age=31536000, immutable",
        },
    )
