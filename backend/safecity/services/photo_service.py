from __future__ import annotations

from flask import current_app
from werkzeug.datastructures import FileStorage

from safecity.extensions import db
from safecity.models.photo import Photo
from safecity.services.incident_service import require_incident
from safecity.utils.errors import bad_request, not_found

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
UPLOAD_MAX_BYTES = 5 * 1024 * 1024


def persist_upload(file: FileStorage | None, uploaded_by_id: int | None, incident_id: int | None = None) -> dict:
    """Store an image in the photos table, optionally linked to an incident right away."""
    if file is None or not (file.filename or "").strip():
        raise bad_request("No file provided")

    max_bytes = int(current_app.config.get("UPLOAD_MAX_BYTES", UPLOAD_MAX_BYTES))
    data = file.read()
    size = len(data)

    if size == 0:
        raise bad_request("Uploaded file is empty")
    if size > max_bytes:
        raise bad_request(f"File cannot exceed {max_bytes // (1024 * 1024)}MB", {"size": size})

    mime_type = (file.mimetype or "").lower()
    if mime_type not in ALLOWED_MIME_TYPES:
        raise bad_request("Only JPEG, PNG and WebP images are allowed", {"type": mime_type})

    if incident_id is not None:
        require_incident(incident_id)

    photo = Photo(
        incident_id=incident_id,
        uploaded_by_id=uploaded_by_id,
        mime_type=mime_type,
        size=size,
        data=data,
    )
    db.session.add(photo)
    db.session.commit()

    current_app.logger.info(
        "[photos] stored id=%s size=%s type=%s incident=%s",
        photo.id,
        size,
        mime_type,
        incident_id,
    )
    return {"photo_id": photo.id}


def get_photo(photo_id: int) -> Photo:
    photo: Photo | None = db.session.get(Photo, photo_id)
    if not photo:
        raise not_found("Photo not found", {"photo_id": photo_id})
    return photo
