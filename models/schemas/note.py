from marshmallow import Schema, fields, validate, EXCLUDE


class NoteCreateSchema(Schema):
    title = fields.String(allow_none=True, validate=validate.Length(max=255))
    value = fields.String(allow_none=True)

    class Meta:
        unknown = EXCLUDE


class NoteUpdateSchema(NoteCreateSchema):
    pass


class NoteOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    value = fields.String(allow_none=True)
    user_id = fields.String(data_key="userId")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
