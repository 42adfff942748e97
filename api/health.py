from flask import Blueprint

from api.errors import success_response

bp = Blueprint("health", __name__)


@bp.get("/ping")
def ping():
    """
    Liveness probe
    ---
    tags:
      - Health
    responses:
      200:
        description: pong
    """
    return success_response({"message": "pong"})


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            ok:
              type: boolean
            data:
              type: object
              properties:
                status: { type: string, example: ok }
                version: { type: string, example: 1.0.0 }
    """
    return success_response({"status": "ok", "version": "1.0.0"})
