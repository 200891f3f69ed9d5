from marshmallow import Schema, fields


class SessionOutSchema(Schema):
    """Dumps services.registry.SessionSummary values."""
    id = fields.String()
    device = fields.String()
    ip_address = fields.String(allow_none=True)
    created_at = fields.DateTime()
    last_used_at = fields.DateTime()
    expires_at = fields.DateTime()
    is_current = fields.Boolean()
