import enum


class Role(str, enum.Enum):
    CITIZEN = "CITIZEN"
    OPERATOR = "OPERATOR"
    ADMIN = "ADMIN"


class IncidentStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


class IncidentCategory(str, enum.Enum):
    STREET_LIGHTING = "Street Lighting"
    POTHOLES = "Potholes"
    GARBAGE = "Garbage"
    ILLEGAL_PARKING = "Illegal Parking"
    OTHER = "Other"


INCIDENT_CATEGORIES = [c.value for c in IncidentCategory]
INCIDENT_STATUSES = [s.value for s in IncidentStatus]
ROLES = [r.value for r in Role]
