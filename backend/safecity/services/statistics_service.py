from __future__ import annotations

from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import func

from safecity.extensions import db
from safecity.models.incident import Incident
from safecity.utils.dates import iso, utcnow
from safecity.utils.errors import bad_request

STATISTICS_DEFAULT_DAYS = 30


def _default_window() -> tuple[datetime, datetime]:
	try:
		days = max(1, int(current_app.config.get("STATISTICS_DEFAULT_DAYS", STATISTICS_DEFAULT_DAYS)))
	except (TypeError, ValueError):
		days = STATISTICS_DEFAULT_DAYS
	end = utcnow()
	return end - timedelta(days=days), end


def get_incident_statistics(start_date: datetime | None = None, end_date: datetime | None = None) -> dict:
	default_start, default_end = _default_window()
	start = start_date or default_start
	end = end_date or default_end

	if start > end:
		raise bad_request("startDate must be before or equal to endDate")

	in_range = (Incident.created_at >= start, Incident.created_at <= end)

	by_category = (
		db.session.query(Incident.category, func.count(Incident.id))
		.filter(*in_range)
		.group_by(Incident.category)
		.all()
	)
	by_status = (
		db.session.query(Incident.status, func.count(Incident.id))
		.filter(*in_range)
		.group_by(Incident.status)
		.all()
	)
	total = db.session.query(func.count(Incident.id)).filter(*in_range).scalar() or 0

	return {
		"by_category": {category: int(count) for category, count in by_category},
		"by_status": {status.value: int(count) for status, count in by_status},
		"total": int(total),
		"date_range": {
			"start": iso(start),
			"end": iso(end),
		},
	}
