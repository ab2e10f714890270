from safecity.extensions import db
from safecity.models.enums import Role
from safecity.utils.dates import utcnow


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(
        db.Enum(Role, name="user_role_enum"),
        nullable=False,
        default=Role.CITIZEN,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    incidents = db.relationship(
        "Incident",
        back_populates="user",
        foreign_keys="Incident.user_id",
    )

    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"
