from __future__ import annotations

from flask import Blueprint, g

from api.errors import success_response
from models.schemas.user import UserOutSchema
from services import auth as auth_service
from utils.decorators import jwt_required

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: No user found
    """
    user = auth_service.current_user(g.current_user_id)
    return success_response({"user": user_out_schema.dump(user)})
