from marshmallow import fields, validate
from safecity.extensions import ma

from safecity.models.enums import ROLES


class AssignIncidentSchema(ma.Schema):
    operator_id = fields.Integer(required=True, allow_none=True)


class RoleUpdateSchema(ma.Schema):
    role = fields.String(
        required=True,
        validate=validate.OneOf(ROLES, error="role must be one of: " + ", ".join(ROLES)),
    )
