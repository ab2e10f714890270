from __future__ import annotations

from math import ceil

from flask import current_app
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload, selectinload

from safecity.extensions import db
from safecity.models.enums import IncidentStatus, Role
from safecity.models.incident import Incident
from safecity.models.incident_history import IncidentHistory
from safecity.models.incident_vote import IncidentVote
from safecity.models.photo import Photo
from safecity.models.user import User
from safecity.schemas.incident_schemas import IncidentHistorySchema
from safecity.utils import permissions
from safecity.utils.dates import iso
from safecity.utils.errors import bad_request, conflict, not_found


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
SEARCH_MAX_RESULTS = 50
TRENDING_LIMIT = 10

history_schema = IncidentHistorySchema(many=True)


def _config_int(key: str, default: int) -> int:
    try:
        return max(1, int(current_app.config.get(key, default)))
    except (TypeError, ValueError):
        return default


def _ordering():
    # Most supported first, then newest
    return (Incident.upvotes.desc(), Incident.created_at.desc(), Incident.id.desc())


def _with_summary_relations(query):
    return query.options(joinedload(Incident.user), selectinload(Incident.photos))


def incident_to_dict(incident: Incident) -> dict:
    user = getattr(incident, "user", None)
    return {
        "id": incident.id,
        "description": incident.description,
        "category": incident.category,
        "status": incident.status.value,
        "latitude": incident.latitude,
        "longitude": incident.longitude,
        "address": incident.address,
        "upvotes": int(incident.upvotes or 0),
        "user_id": incident.user_id,
        "assigned_to_id": incident.assigned_to_id,
        "photo_ids": sorted(p.id for p in (incident.photos or [])),
        "created_at": iso(incident.created_at),
        "updated_at": iso(incident.updated_at),
        "user": {
            "first_name": user.first_name,
            "last_name": user.last_name,
        }
        if user
        else None,
    }


def parse_status(value) -> IncidentStatus:
    if isinstance(value, IncidentStatus):
        return value
    try:
        return IncidentStatus(str(value).strip().upper())
    except (TypeError, ValueError):
        raise bad_request("Invalid status", {"status": value})


def _pagination(page, page_size) -> tuple[int, int]:
    default_size = _config_int("DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE)
    max_size = _config_int("MAX_PAGE_SIZE", MAX_PAGE_SIZE)
    try:
        page_int = max(int(page), 1)
    except (TypeError, ValueError):
        page_int = 1
    try:
        size_int = min(max(int(page_size), 1), max_size)
    except (TypeError, ValueError):
        size_int = default_size
    return page_int, size_int


def apply_filters(query, filters: dict | None):
    """status / category / created_at range / reporter, all optional and ANDed."""
    filters = filters or {}

    if filters.get("status"):
        query = query.filter(Incident.status == parse_status(filters["status"]))
    if filters.get("category"):
        query = query.filter(Incident.category == filters["category"])
    if filters.get("start_date"):
        query = query.filter(Incident.created_at >= filters["start_date"])
    if filters.get("end_date"):
        query = query.filter(Incident.created_at <= filters["end_date"])
    if filters.get("user_id"):
        query = query.filter(Incident.user_id == filters["user_id"])
    return query


def list_incidents(filters: dict | None = None, page=1, page_size=None) -> dict:
    page_int, size_int = _pagination(page, page_size)

    query = apply_filters(Incident.query, filters)
    total = query.count()
    items = (
        _with_summary_relations(query)
        .order_by(*_ordering())
        .offset((page_int - 1) * size_int)
        .limit(size_int)
        .all()
    )

    return {
        "items": [incident_to_dict(i) for i in items],
        "total": int(total),
        "page": page_int,
        "page_size": size_int,
        "pages": ceil(total / size_int) if total else 0,
    }


def list_user_incidents(user_id: int, filters: dict | None = None, page=1, page_size=None) -> dict:
    return list_incidents({**(filters or {}), "user_id": user_id}, page=page, page_size=page_size)


def list_trending(limit=None) -> list[dict]:
    default = _config_int("TRENDING_LIMIT", TRENDING_LIMIT)
    try:
        limit_int = min(max(int(limit), 1), _config_int("MAX_PAGE_SIZE", MAX_PAGE_SIZE))
    except (TypeError, ValueError):
        limit_int = default

    items = _with_summary_relations(Incident.query).order_by(*_ordering()).limit(limit_int).all()
    return [incident_to_dict(i) for i in items]


def require_incident(incident_id: int) -> Incident:
    incident: Incident | None = db.session.get(Incident, incident_id)
    if not incident:
        raise not_found("Incident not found", {"incident_id": incident_id})
    return incident


def get_incident(incident_id: int) -> dict:
    incident = require_incident(incident_id)
    data = incident_to_dict(incident)
    data["comment_count"] = len(incident.comments or [])
    data["history"] = history_schema.dump(incident.history or [])
    return data


def create_incident(user_id: int, data: dict) -> Incident:
    """Create the report and attach its already-uploaded photos in one transaction."""
    incident = Incident(
        description=data["description"],
        category=data["category"],
        latitude=data["latitude"],
        longitude=data["longitude"],
        address=data.get("address"),
        status=IncidentStatus.PENDING,
        upvotes=0,
        user_id=user_id,
    )

    try:
        db.session.add(incident)
        db.session.flush()

        photo_ids = data.get("photo_ids") or []
        if photo_ids:
            # Only photos not yet linked to another report can be claimed
            photos = (
                Photo.query.filter(Photo.id.in_(photo_ids))
                .filter(Photo.incident_id.is_(None))
                .all()
            )
            for photo in photos:
                photo.incident_id = incident.id

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "[incidents] created id=%s user=%s category=%s",
        incident.id,
        user_id,
        incident.category,
    )
    return incident


def delete_incident(incident_id: int, actor: User) -> dict:
    incident = require_incident(incident_id)
    permissions.ensure_can_delete_incident(actor, incident)

    db.session.delete(incident)
    db.session.commit()

    current_app.logger.info("[incidents] deleted id=%s by user=%s", incident_id, actor.id)
    return {"id": incident_id, "deleted": True}


def update_status(incident_id: int, actor_id: int, new_status) -> Incident:
    """
    Move an incident to `new_status`.

    Same status is a no-op (no history row). Otherwise the history row and the
    status update are committed together; the incident row is locked while the
    current status is read.
    """
    target = parse_status(new_status)

    incident: Incident | None = (
        Incident.query.filter(Incident.id == incident_id).with_for_update().populate_existing().first()
    )
    if not incident:
        raise not_found("Incident not found", {"incident_id": incident_id})

    if incident.status == target:
        db.session.rollback()
        return incident

    old_status = incident.status
    try:
        db.session.add(
            IncidentHistory(
                incident_id=incident.id,
                changed_by_id=actor_id,
                old_status=old_status,
                new_status=target,
            )
        )
        incident.status = target
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "[incidents] status id=%s %s -> %s by user=%s",
        incident_id,
        old_status.value,
        target.value,
        actor_id,
    )
    return incident


def update_status_with_permission(incident_id: int, actor: User, new_status) -> Incident:
    target = parse_status(new_status)
    incident = require_incident(incident_id)
    permissions.ensure_can_change_status(actor, incident)
    return update_status(incident_id, actor.id, target)


def list_history(incident_id: int) -> list[dict]:
    require_incident(incident_id)
    rows = (
        IncidentHistory.query.options(joinedload(IncidentHistory.changed_by))
        .filter_by(incident_id=incident_id)
        .order_by(IncidentHistory.changed_at.asc(), IncidentHistory.id.asc())
        .all()
    )
    return history_schema.dump(rows)


def assign_incident(incident_id: int, actor: User, operator_id: int | None) -> Incident:
    permissions.ensure_can_assign_incident(actor)
    incident = require_incident(incident_id)

    if operator_id is not None:
        operator: User | None = db.session.get(User, operator_id)
        if not operator or operator.role != Role.OPERATOR:
            raise bad_request("Assignee must be an operator", {"operator_id": operator_id})

    incident.assigned_to_id = operator_id
    db.session.commit()

    current_app.logger.info(
        "[incidents] assigned id=%s operator=%s by user=%s",
        incident_id,
        operator_id,
        actor.id,
    )
    return incident


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_incidents(query: str | None, limit=None) -> list[dict]:
    term = (query or "").strip()
    if not term:
        return []

    max_results = _config_int("SEARCH_MAX_RESULTS", SEARCH_MAX_RESULTS)
    try:
        limit_int = min(max(int(limit), 1), max_results)
    except (TypeError, ValueError):
        limit_int = max_results

    pattern = _like_pattern(term)
    items = (
        _with_summary_relations(Incident.query)
        .filter(
            or_(
                Incident.description.ilike(pattern, escape="\\"),
                Incident.category.ilike(pattern, escape="\\"),
                Incident.address.ilike(pattern, escape="\\"),
            )
        )
        .order_by(*_ordering())
        .limit(limit_int)
        .all()
    )
    return [incident_to_dict(i) for i in items]


def toggle_upvote(incident_id: int, user_id: int) -> dict:
    """Vote if the user has not voted yet, otherwise take the vote back."""
    incident: Incident | None = (
        Incident.query.filter(Incident.id == incident_id).with_for_update().populate_existing().first()
    )
    if not incident:
        raise not_found("Incident not found", {"incident_id": incident_id})

    try:
        vote = db.session.get(IncidentVote, (incident_id, user_id))
        if vote is not None:
            db.session.delete(vote)
            delta = -1
        else:
            db.session.add(IncidentVote(incident_id=incident_id, user_id=user_id))
            delta = 1
        db.session.flush()

        db.session.execute(
            update(Incident)
            .where(Incident.id == incident_id)
            .values(upvotes=Incident.upvotes + delta)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise conflict("Vote changed concurrently, retry", {"incident_id": incident_id})
    except Exception:
        db.session.rollback()
        raise

    # expired by the commit, reloaded from the database
    upvotes = int(incident.upvotes or 0)
    current_app.logger.info(
        "[votes] incident=%s user=%s voted=%s upvotes=%s",
        incident_id,
        user_id,
        delta > 0,
        upvotes,
    )
    return {"upvotes": upvotes, "has_voted": delta > 0}


def has_voted(incident_id: int, user_id: int | None) -> bool:
    if user_id is None:
        return False
    return db.session.get(IncidentVote, (incident_id, user_id)) is not None
