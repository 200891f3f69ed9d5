from marshmallow import EXCLUDE, Schema, fields, pre_load, validates, ValidationError


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _EmailNormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class RegisterSchema(_EmailNormalizingSchema):
    email = fields.Email(required=True)
    username = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")

    @validates("username")
    def validate_username(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("Username must not be blank.")


class LoginSchema(_EmailNormalizingSchema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    remember_me = fields.Boolean(load_default=False)


class LogoutSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    all_devices = fields.Boolean(load_default=False)
    refresh_token = fields.String(load_default=None)


class EmailSchema(_EmailNormalizingSchema):
    email = fields.Email(required=True)


class AccountOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    username = fields.String(allow_none=True)
    is_admin = fields.Boolean()
    created_at = fields.DateTime()
    last_login_at = fields.DateTime(allow_none=True)
    last_active_at = fields.DateTime(allow_none=True)


class LockoutStatusSchema(Schema):
    is_locked = fields.Boolean()
    locked_until = fields.DateTime(allow_none=True)
    failed_attempts = fields.Integer()
