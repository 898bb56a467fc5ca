from marshmallow import EXCLUDE, Schema, fields, pre_load, validate, validates

from models.schemas.common import normalize_email, validate_name, validate_password_strength


def _strip(data, key):
    if isinstance(data.get(key), str):
        data[key] = data[key].strip()


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    name = fields.String(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                data["email"] = normalize_email(data["email"])
            _strip(data, "name")
        return data

    @validates("password")
    def check_password(self, value, **kwargs):
        validate_password_strength(value)

    @validates("name")
    def check_name(self, value, **kwargs):
        validate_name(value)


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = normalize_email(data["email"])
        return data


class ProfileUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(allow_none=True)
    avatar = fields.Url(allow_none=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            _strip(data, "name")
        return data

    @validates("name")
    def check_name(self, value, **kwargs):
        if value is not None:
            validate_name(value)


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    email = fields.String()
    name = fields.String(allow_none=True)
    avatar = fields.String(allow_none=True)
    provider = fields.String()
    is_verified = fields.Boolean(data_key="isVerified")
    google_id = fields.String(allow_none=True, data_key="googleId")
    github_id = fields.String(allow_none=True, data_key="githubId")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
