from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

# Same pattern the web client validates against
EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class SignupSchema(Schema):
    email = fields.String(
        required=True,
        validate=validate.Regexp(EMAIL_PATTERN, error="Invalid email address."),
    )
    # "@" marks an email at login, so usernames never carry one
    username = fields.String(
        required=True,
        validate=[
            validate.Length(min=1),
            validate.ContainsNoneOf(["@"], error="Username cannot contain '@'."),
        ],
    )
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                email = _strip(data["email"])
                data["email"] = email.lower() if isinstance(email, str) else email
            if "username" in data:
                data["username"] = _strip(data["username"])
        return data


class LoginSchema(Schema):
    username_or_email = fields.String(
        required=True, data_key="usernameOrEmail", validate=validate.Length(min=1)
    )
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "usernameOrEmail" in data:
            data = dict(data)
            data["usernameOrEmail"] = _strip(data["usernameOrEmail"])
        return data


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    username = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
