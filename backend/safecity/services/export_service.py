from __future__ import annotations

import csv
import io

from flask import current_app
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import joinedload, selectinload

from safecity.models.comment import Comment
from safecity.models.incident import Incident
from safecity.services.comment_service import DELETED_PLACEHOLDER
from safecity.services.incident_service import apply_filters
from safecity.utils.dates import day, utcnow
from safecity.utils.errors import bad_request

# (row key, column header), in file order
EXPORT_COLUMNS = [
	("id", "ID"),
	("description", "Description"),
	("category", "Category"),
	("address", "Address"),
	("status", "Status"),
	("latitude", "Latitude"),
	("longitude", "Longitude"),
	("reported_by", "Reported By"),
	("reporter_email", "Reporter Email"),
	("created_at", "Created Date"),
	("updated_at", "Updated Date"),
	("comments", "Comments"),
	("photos_count", "Photos Count"),
]

EXPORT_FORMATS = {
	"csv": "text/csv; charset=utf-8",
	"xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _comment_log(comments: list[Comment]) -> str:
	parts = []
	for c in comments:
		author = c.user.full_name() if c.user else ""
		text = DELETED_PLACEHOLDER if c.is_deleted else c.content
		parts.append(f"[{day(c.created_at)}] {author}: {text}")
	return " | ".join(parts) or "-"


def incident_to_row(incident: Incident) -> dict:
	user = incident.user
	return {
		"id": incident.id,
		"description": incident.description,
		"category": incident.category,
		"address": incident.address or "-",
		"status": incident.status.value,
		"latitude": incident.latitude,
		"longitude": incident.longitude,
		"reported_by": user.full_name() if user else "",
		"reporter_email": user.email if user else "",
		"created_at": day(incident.created_at),
		"updated_at": day(incident.updated_at),
		"comments": _comment_log(incident.comments or []),
		"photos_count": len(incident.photos or []),
	}


def export_rows(filters: dict | None = None) -> list[dict]:
	"""Every incident matching `filters`, newest first, flattened to scalar columns."""
	query = apply_filters(Incident.query, filters).options(
		joinedload(Incident.user),
		selectinload(Incident.comments).joinedload(Comment.user),
		selectinload(Incident.photos),
	)
	incidents = query.order_by(Incident.created_at.desc(), Incident.id.desc()).all()
	return [incident_to_row(i) for i in incidents]


def to_csv(rows: list[dict]) -> str:
	buf = io.StringIO()
	writer = csv.writer(buf)
	writer.writerow([header for _, header in EXPORT_COLUMNS])
	for row in rows:
		writer.writerow([row.get(key) for key, _ in EXPORT_COLUMNS])
	return buf.getvalue()


def to_xlsx(rows: list[dict]) -> bytes:
	wb = Workbook()
	ws = wb.active
	ws.title = "Incidents"

	ws.append([header for _, header in EXPORT_COLUMNS])
	for row in rows:
		ws.append([row.get(key) for key, _ in EXPORT_COLUMNS])

	# Width follows the header, clamped to 15..50 characters
	for idx, (key, _) in enumerate(EXPORT_COLUMNS, start=1):
		ws.column_dimensions[get_column_letter(idx)].width = min(max(len(key), 15), 50)

	out = io.BytesIO()
	wb.save(out)
	return out.getvalue()


def export_incidents(fmt: str | None, filters: dict | None = None) -> tuple[bytes | str, str, str]:
	"""Return (payload, mimetype, filename) for the requested format."""
	f = (fmt or "csv").strip().lower()
	if f not in EXPORT_FORMATS:
		raise bad_request("Invalid export format. Use: csv|xlsx", {"format": fmt})

	rows = export_rows(filters)
	payload = to_xlsx(rows) if f == "xlsx" else to_csv(rows)
	filename = f"incidents_export_{utcnow().date().isoformat()}.{f}"

	current_app.logger.info("[export] format=%s rows=%s", f, len(rows))
	return payload, EXPORT_FORMATS[f], filename
