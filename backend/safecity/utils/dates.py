from __future__ import annotations

from datetime import date, datetime, time, timezone


def utcnow() -> datetime:
	"""Naive UTC timestamp, the form stored in every DateTime column."""
	return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(dt: datetime | None) -> str | None:
	return dt.isoformat() if dt else None


def day(dt: datetime | None) -> str:
	return dt.date().isoformat() if dt else ""


def parse_boundary(value: str | None, end_of_day: bool = False) -> datetime | None:
	"""Parse `YYYY-MM-DD` or an ISO-8601 datetime into naive UTC.

	A bare date used as an upper bound covers the whole day.
	Raises ValueError on anything else.
	"""

	raw = (value or "").strip()
	if not raw:
		return None

	if len(raw) == 10:
		d = date.fromisoformat(raw)
		return datetime.combine(d, time.max if end_of_day else time.min)

	dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
	if dt.tzinfo is not None:
		dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
	return dt
