from safecity.extensions import db
from safecity.utils.dates import utcnow


class IncidentVote(db.Model):
    __tablename__ = "incident_votes"

    # Composite PK: one vote per user and incident
    incident_id = db.Column(
        db.Integer,
        db.ForeignKey("incidents.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    incident = db.relationship("Incident", back_populates="votes")
