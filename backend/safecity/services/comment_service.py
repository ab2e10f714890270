from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from safecity.extensions import db
from safecity.models.comment import Comment
from safecity.models.user import User
from safecity.services.incident_service import require_incident
from safecity.utils import permissions
from safecity.utils.dates import iso, utcnow
from safecity.utils.errors import bad_request, not_found

DELETED_PLACEHOLDER = "[deleted]"


def comment_to_dict(c: Comment) -> dict:
	user = getattr(c, "user", None)
	return {
		"id": c.id,
		"incident_id": c.incident_id,
		"user_id": c.user_id,
		"parent_id": c.parent_id,
		# soft-deleted comments stay in the thread but lose their text
		"content": DELETED_PLACEHOLDER if c.is_deleted else c.content,
		"first_name": user.first_name if user else None,
		"last_name": user.last_name if user else None,
		"created_at": iso(c.created_at),
		"deleted_at": iso(c.deleted_at),
		"is_deleted": c.is_deleted,
	}


def list_comments(incident_id: int) -> list[dict]:
	require_incident(incident_id)
	rows = (
		Comment.query.options(joinedload(Comment.user))
		.filter_by(incident_id=incident_id)
		.order_by(Comment.created_at.asc(), Comment.id.asc())
		.all()
	)
	return [comment_to_dict(c) for c in rows]


def create_comment(incident_id: int, actor: User, content: str, parent_id: int | None = None) -> Comment:
	require_incident(incident_id)

	if parent_id is not None:
		parent: Comment | None = db.session.get(Comment, parent_id)
		if not parent or parent.incident_id != incident_id:
			raise bad_request("Parent comment is invalid", {"parent_id": parent_id})

	comment = Comment(
		incident_id=incident_id,
		user_id=actor.id,
		parent_id=parent_id,
		content=content.strip(),
	)
	try:
		db.session.add(comment)
		db.session.commit()
	except IntegrityError:
		# parent removed between the check and the insert
		db.session.rollback()
		raise bad_request("Parent comment is invalid", {"parent_id": parent_id})
	except Exception:
		db.session.rollback()
		raise

	current_app.logger.info(
		"[comments] created id=%s incident=%s user=%s parent=%s",
		comment.id,
		incident_id,
		actor.id,
		parent_id,
	)
	return comment


def delete_comment(comment_id: int, incident_id: int, actor: User) -> dict:
	"""
	Hard delete when nobody replied, otherwise keep the row as a "[deleted]"
	placeholder so the replies keep their parent.
	"""
	comment: Comment | None = db.session.get(Comment, comment_id)
	if not comment:
		raise not_found("Comment not found", {"comment_id": comment_id})
	if comment.incident_id != incident_id:
		raise bad_request(
			"Comment does not belong to incident",
			{"comment_id": comment_id, "incident_id": incident_id},
		)

	permissions.ensure_can_delete_comment(actor, comment)

	has_replies = Comment.query.filter_by(parent_id=comment.id).count() > 0

	if has_replies:
		if comment.deleted_at is None:
			comment.deleted_at = utcnow()
			db.session.commit()
		soft_deleted = True
	else:
		db.session.delete(comment)
		db.session.commit()
		soft_deleted = False

	current_app.logger.info(
		"[comments] deleted id=%s incident=%s by user=%s soft=%s",
		comment_id,
		incident_id,
		actor.id,
		soft_deleted,
	)
	return {"id": comment_id, "soft_deleted": soft_deleted}
