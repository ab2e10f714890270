from flask import current_app
from marshmallow import (
    EXCLUDE,
    fields,
    post_load,
    pre_load,
    validate,
    validates,
    ValidationError,
)
from safecity.extensions import ma

from safecity.models.enums import INCIDENT_CATEGORIES, INCIDENT_STATUSES, IncidentStatus
from safecity.models.incident_history import IncidentHistory
from safecity.utils.dates import parse_boundary


class IncidentCreateSchema(ma.Schema):
    """
    Payload for a new report. Status is not accepted: every report starts PENDING.
    """

    class Meta:
        unknown = EXCLUDE

    description = fields.String(
        required=True,
        validate=validate.Length(min=10, max=1000, error="Description must be between 10 and 1000 characters."),
    )
    category = fields.String(
        required=True,
        validate=validate.OneOf(INCIDENT_CATEGORIES, error="Category must be one of: " + ", ".join(INCIDENT_CATEGORIES)),
    )
    latitude = fields.Float(
        required=True,
        allow_nan=False,
        validate=validate.Range(min=-90, max=90, error="Invalid latitude"),
    )
    longitude = fields.Float(
        required=True,
        allow_nan=False,
        validate=validate.Range(min=-180, max=180, error="Invalid longitude"),
    )
    address = fields.String(
        load_default=None,
        allow_none=True,
        validate=validate.Length(max=255),
    )
    photo_ids = fields.List(fields.Integer(), load_default=list)

    @validates("description")
    def validate_description(self, value, **kwargs):
        if len(value.strip()) < 10:
            raise ValidationError("Description must contain at least 10 non-whitespace characters.")

    @validates("photo_ids")
    def validate_photo_ids(self, value, **kwargs):
        max_photos = int(current_app.config.get("MAX_PHOTOS_PER_INCIDENT", 3))
        if value is not None and len(value) > max_photos:
            raise ValidationError(f"You can upload a maximum of {max_photos} photos.")

    @post_load
    def normalize(self, data, **kwargs):
        data["description"] = data["description"].strip()
        address = (data.get("address") or "").strip()
        data["address"] = address or None
        # Keep order, drop repeats
        data["photo_ids"] = list(dict.fromkeys(data.get("photo_ids") or []))
        return data


class IncidentFilterSchema(ma.Schema):
    """
    Query-string filters shared by listing, export and the user's own reports.
    Blank values and `any` mean "no filter".
    """

    class Meta:
        unknown = EXCLUDE

    status = fields.String(
        load_default=None,
        validate=validate.OneOf(INCIDENT_STATUSES, error="status must be one of: " + ", ".join(INCIDENT_STATUSES)),
    )
    category = fields.String(load_default=None)
    start_date = fields.String(load_default=None, data_key="startDate")
    end_date = fields.String(load_default=None, data_key="endDate")

    @pre_load
    def drop_empty(self, data, **kwargs):
        cleaned = {}
        for key, value in dict(data).items():
            s = str(value).strip() if value is not None else ""
            if not s or s.lower() == "any":
                continue
            cleaned[key] = s
        # snake_case aliases
        for alias, key in (("start_date", "startDate"), ("end_date", "endDate")):
            if alias in cleaned and key not in cleaned:
                cleaned[key] = cleaned.pop(alias)
        return cleaned

    @post_load
    def to_filters(self, data, **kwargs):
        errors = {}
        try:
            data["start_date"] = parse_boundary(data.get("start_date"))
        except ValueError:
            errors["startDate"] = ["Invalid date format. Use ISO 8601 (YYYY-MM-DD)."]
        try:
            data["end_date"] = parse_boundary(data.get("end_date"), end_of_day=True)
        except ValueError:
            errors["endDate"] = ["Invalid date format. Use ISO 8601 (YYYY-MM-DD)."]
        if errors:
            raise ValidationError(errors)

        if data.get("status"):
            data["status"] = IncidentStatus(data["status"])
        return data


class IncidentHistorySchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = IncidentHistory
        include_fk = True

    old_status = fields.Function(lambda h: h.old_status.value)
    new_status = fields.Function(lambda h: h.new_status.value)
    changed_by_name = fields.Method("get_changed_by_name")

    def get_changed_by_name(self, obj):
        if getattr(obj, "changed_by", None):
            return obj.changed_by.full_name()
        return None
