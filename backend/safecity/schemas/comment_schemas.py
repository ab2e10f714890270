from marshmallow import fields, validate, validates, ValidationError
from safecity.extensions import ma


class CommentCreateSchema(ma.Schema):
    content = fields.String(
        required=True,
        validate=validate.Length(min=1, max=500, error="Comment must be between 1 and 500 characters."),
    )
    parent_id = fields.Integer(required=False, allow_none=True)

    @validates("content")
    def validate_content(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("Comment cannot be empty.")
