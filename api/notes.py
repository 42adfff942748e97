"""
Notes blueprint. Every route is behind the access guard and only ever sees
notes owned by the caller; another user's note id answers 404.
"""
from __future__ import annotations

from flask import Blueprint, request, g

from api.errors import NotFoundError, success_response
from models import storage
from models.note import DEFAULT_TITLE, Note
from models.schemas.note import NoteCreateSchema, NoteUpdateSchema, NoteOutSchema
from utils.decorators import jwt_required

bp = Blueprint("notes", __name__)

note_create_schema = NoteCreateSchema()
note_update_schema = NoteUpdateSchema()
note_out_schema = NoteOutSchema()
notes_out_schema = NoteOutSchema(many=True)


def _get_owned_note(note_id: str) -> Note:
    session = storage.get_session()
    note = (
        session.query(Note)
        .filter(Note.id == note_id, Note.user_id == g.current_user_id)
        .first()
    )
    if note is None:
        raise NotFoundError("Note not found!")
    return note


@bp.post("/notes")
@jwt_required()
def create_note():
    """
    Create a note
    ---
    tags:
      - Notes
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            title: { type: string, maxLength: 255, default: Untitled }
            value: { type: string }
    responses:
      201:
        description: Created
      401:
        description: Unauthorized
      422:
        description: Validation error
    """
    data = note_create_schema.load(request.get_json(silent=True) or {})
    note = Note(
        title=data.get("title") or DEFAULT_TITLE,
        value=data.get("value"),
        user_id=g.current_user_id,
    )
    storage.new(note)
    storage.save()
    return success_response({"note": note_out_schema.dump(note)}, 201)


@bp.get("/notes")
@jwt_required()
def list_notes():
    """
    List the caller's notes, newest first
    ---
    tags:
      - Notes
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    session = storage.get_session()
    rows = (
        session.query(Note)
        .filter(Note.user_id == g.current_user_id)
        .order_by(Note.updated_at.desc())
        .all()
    )
    return success_response({"notes": notes_out_schema.dump(rows)})


@bp.get("/notes/<note_id>")
@jwt_required()
def get_note(note_id: str):
    """
    Get one note
    ---
    tags:
      - Notes
    security:
      - Bearer: []
    parameters:
      - in: path
        name: note_id
        type: string
        required: true
    responses:
      200:
        description: OK
      404:
        description: Note not found
    """
    note = _get_owned_note(note_id)
    return success_response({"note": note_out_schema.dump(note)})


@bp.put("/notes/<note_id>")
@jwt_required()
def update_note(note_id: str):
    """
    Update title and/or value of a note
    ---
    tags:
      - Notes
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: note_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            title: { type: string }
            value: { type: string }
    responses:
      200:
        description: OK
      404:
        description: Note not found
    """
    data = note_update_schema.load(request.get_json(silent=True) or {})
    note = _get_owned_note(note_id)
    if "title" in data:
        note.title = data["title"] or DEFAULT_TITLE
    if "value" in data:
        note.value = data["value"]
    note.save()
    return success_response({"note": note_out_schema.dump(note)})


@bp.delete("/notes/<note_id>")
@jwt_required()
def delete_note(note_id: str):
    """
    Delete a note
    ---
    tags:
      - Notes
    security:
      - Bearer: []
    parameters:
      - in: path
        name: note_id
        type: string
        required: true
    responses:
      200:
        description: Deleted
      404:
        description: Note not found
    """
    note = _get_owned_note(note_id)
    note.delete()
    storage.save()
    return success_response({"message": "Note deleted successfully!"})
