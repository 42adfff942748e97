from marshmallow import Schema, fields, validate, EXCLUDE


class DeviceInfoSchema(Schema):
    """Fingerprint sent by clients in the x-device-info header."""
    device_id = fields.String(required=True, data_key="deviceId", validate=validate.Length(min=1, max=64))
    device_name = fields.String(data_key="deviceName", allow_none=True)
    device_type = fields.String(data_key="deviceType", allow_none=True)
    platform = fields.String(allow_none=True)
    user_agent = fields.String(data_key="userAgent", allow_none=True)
    browser = fields.String(allow_none=True)
    browser_version = fields.String(data_key="browserVersion", allow_none=True)

    class Meta:
        unknown = EXCLUDE
