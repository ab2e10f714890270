from __future__ import annotations

from flask import current_app
from sqlalchemy import func, or_, select

from safecity.extensions import db
from safecity.models.enums import Role
from safecity.models.incident import Incident
from safecity.models.user import User
from safecity.services import user_service
from safecity.utils import permissions
from safecity.utils.errors import bad_request


def list_users(actor: User, search: str | None, page: int | str, per_page: int | str) -> dict:
	permissions.ensure_can_manage_users(actor)

	try:
		page_int = max(int(page), 1)
	except (TypeError, ValueError):
		page_int = 1
	try:
		per_page_int = min(max(int(per_page), 1), 50)
	except (TypeError, ValueError):
		per_page_int = 10

	incidents_count_sq = (
		select(func.count(Incident.id))
		.where(Incident.user_id == User.id)
		.correlate(User)
		.scalar_subquery()
	)
	assigned_count_sq = (
		select(func.count(Incident.id))
		.where(Incident.assigned_to_id == User.id)
		.correlate(User)
		.scalar_subquery()
	)

	query = db.session.query(
		User,
		incidents_count_sq.label("incidents_count"),
		assigned_count_sq.label("assigned_count"),
	)

	if search:
		s = f"%{str(search).strip()}%"
		query = query.filter(
			or_(
				User.first_name.ilike(s),
				User.last_name.ilike(s),
				User.email.ilike(s),
			)
		)

	total = query.count()
	rows = (
		query.order_by(User.id.desc())
		.offset((page_int - 1) * per_page_int)
		.limit(per_page_int)
		.all()
	)

	items: list[dict] = []
	for u, incidents_count, assigned_count in rows:
		item = user_service.user_to_dict(u)
		item["incidents_count"] = int(incidents_count or 0)
		item["assigned_count"] = int(assigned_count or 0)
		items.append(item)

	return {
		"page": page_int,
		"per_page": per_page_int,
		"total": int(total),
		"items": items,
	}


def update_user_role(actor: User, user_id: int, role: str) -> dict:
	permissions.ensure_can_manage_users(actor)

	try:
		new_role = Role(str(role or "").strip().upper())
	except ValueError:
		raise bad_request("Invalid role", {"role": role})

	user = user_service.require_user(user_id)

	if user.id == actor.id and new_role != Role.ADMIN:
		raise bad_request("Admins cannot demote themselves", {"user_id": user_id})

	old_role = user.role
	user.role = new_role

	# An operator that loses the role also loses its assignments
	if old_role == Role.OPERATOR and new_role != Role.OPERATOR:
		Incident.query.filter_by(assigned_to_id=user.id).update(
			{Incident.assigned_to_id: None},
			synchronize_session=False,
		)

	db.session.commit()

	current_app.logger.info(
		"[admin] role user=%s %s -> %s by user=%s",
		user.id,
		old_role.value,
		new_role.value,
		actor.id,
	)
	return user_service.user_to_dict(user)
