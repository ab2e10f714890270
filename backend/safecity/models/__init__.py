from .user import User
from .incident import Incident
from .comment import Comment
from .incident_history import IncidentHistory
from .incident_vote import IncidentVote
from .photo import Photo

__all__ = [
    "User",
    "Incident",
    "Comment",
    "IncidentHistory",
    "IncidentVote",
    "Photo",
]
