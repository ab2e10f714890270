from safecity.extensions import db
from safecity.models.enums import IncidentStatus
from safecity.utils.dates import utcnow


class Incident(db.Model):
    __tablename__ = "incidents"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), nullable=False)

    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    address = db.Column(db.String(255), nullable=True)

    status = db.Column(
        db.Enum(IncidentStatus, name="incident_status_enum"),
        nullable=False,
        default=IncidentStatus.PENDING,
    )

    # Denormalized count of incident_votes rows
    upvotes = db.Column(db.Integer, nullable=False, default=0)

    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Operator in charge; only they (or an admin) may move the status
    assigned_to_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="incidents", foreign_keys=[user_id])
    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])

    comments = db.relationship(
        "Comment",
        back_populates="incident",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )
    photos = db.relationship(
        "Photo",
        back_populates="incident",
        cascade="all, delete-orphan",
    )
    history = db.relationship(
        "IncidentHistory",
        back_populates="incident",
        cascade="all, delete-orphan",
        order_by="IncidentHistory.changed_at",
    )
    votes = db.relationship(
        "IncidentVote",
        back_populates="incident",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_incidents_latitude"),
        db.CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_incidents_longitude"),
        db.CheckConstraint("upvotes >= 0", name="ck_incidents_upvotes"),
        db.Index("ix_incidents_status", "status"),
        db.Index("ix_incidents_category", "category"),
        db.Index("ix_incidents_created_at", "created_at"),
        db.Index("ix_incidents_user_id", "user_id"),
    )
