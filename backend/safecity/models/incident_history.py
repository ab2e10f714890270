from safecity.extensions import db
from safecity.models.enums import IncidentStatus
from safecity.utils.dates import utcnow


class IncidentHistory(db.Model):
    """Audit row written once per effective status change. Never updated."""

    __tablename__ = "incident_history"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    incident_id = db.Column(
        db.Integer,
        db.ForeignKey("incidents.id", ondelete="CASCADE"),
        nullable=False,
    )
    changed_by_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    old_status = db.Column(db.Enum(IncidentStatus, name="incident_status_enum"), nullable=False)
    new_status = db.Column(db.Enum(IncidentStatus, name="incident_status_enum"), nullable=False)

    changed_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    incident = db.relationship("Incident", back_populates="history")
    changed_by = db.relationship("User")

    __table_args__ = (
        db.Index("ix_incident_history_incident_id", "incident_id"),
    )
