"""
One authorization check per action.

Every check takes the acting user (and the target when ownership matters) and
raises a forbidden ApiError when the action is not allowed.
"""
from __future__ import annotations

from flask import current_app

from safecity.models.comment import Comment
from safecity.models.enums import Role
from safecity.models.incident import Incident
from safecity.models.user import User
from safecity.utils.errors import forbidden

PRIVILEGED_ROLES = (Role.ADMIN, Role.OPERATOR)


def is_admin(user: User | None) -> bool:
    return user is not None and user.role == Role.ADMIN


def is_privileged(user: User | None) -> bool:
    return user is not None and user.role in PRIVILEGED_ROLES


def _deny(message: str, action: str, user: User | None, **details):
    current_app.logger.warning(
        "[permissions] denied action=%s user=%s role=%s details=%s",
        action,
        getattr(user, "id", None),
        getattr(getattr(user, "role", None), "value", None),
        details,
    )
    raise forbidden(message, details or None)


def ensure_can_change_status(user: User, incident: Incident) -> None:
    if is_admin(user):
        return
    if user.role == Role.OPERATOR and incident.assigned_to_id == user.id:
        return
    _deny(
        "Only admins or the assigned operator can update this incident",
        "change_status",
        user,
        incident_id=incident.id,
    )


def ensure_can_assign_incident(user: User) -> None:
    if not is_admin(user):
        _deny("Admin access required", "assign_incident", user)


def ensure_can_delete_incident(user: User, incident: Incident) -> None:
    if incident.user_id == user.id or is_admin(user):
        return
    _deny("Cannot delete an incident you do not own", "delete_incident", user, incident_id=incident.id)


def ensure_can_delete_comment(user: User, comment: Comment) -> None:
    if comment.user_id == user.id or is_privileged(user):
        return
    _deny("Not allowed to delete this comment", "delete_comment", user, comment_id=comment.id)


def ensure_can_export(user: User) -> None:
    if not is_admin(user):
        _deny("Only admins can export incidents", "export", user)


def ensure_can_view_statistics(user: User) -> None:
    if not is_admin(user):
        _deny("Admin access required", "view_statistics", user)


def ensure_can_manage_users(user: User) -> None:
    if not is_admin(user):
        _deny("Admin access required", "manage_users", user)
