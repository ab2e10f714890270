from safecity.extensions import db
from safecity.utils.dates import utcnow


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    incident_id = db.Column(
        db.Integer,
        db.ForeignKey("incidents.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    parent_id = db.Column(
        db.Integer,
        db.ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
    )

    content = db.Column(db.String(500), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Set instead of deleting while the comment still has replies
    deleted_at = db.Column(db.DateTime, nullable=True)

    incident = db.relationship("Incident", back_populates="comments")
    user = db.relationship("User")

    parent = db.relationship("Comment", remote_side=[id], back_populates="replies")
    replies = db.relationship("Comment", back_populates="parent")

    __table_args__ = (
        db.Index("ix_comments_incident_id", "incident_id"),
        db.Index("ix_comments_parent_id", "parent_id"),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
