"""
Session management for the signed-in account:
- GET    /auth/sessions
- DELETE /auth/sessions/<session_id>
- DELETE /auth/sessions   (every session except the caller's own)
"""
from __future__ import annotations

from flask import Blueprint, jsonify, g, current_app

from api.errors import auth_error_response
from models.schemas.session import SessionOutSchema
from utils.guards import AUTHENTICATED, install_guards

bp = Blueprint("sessions", __name__)
install_guards(bp, default=AUTHENTICATED)

session_list_out_schema = SessionOutSchema(many=True)


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


@bp.get("")
def list_sessions():
    """
    List the caller's active sessions, most recently used first.
    ---
    tags:
      - Sessions
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    registry = current_app.extensions["auth_services"].registry
    sessions = registry.list_sessions(g.current_account.id, g.access_claims.get("sid"))
    total = len(sessions)
    return jsonify(
        {
            "sessions": session_list_out_schema.dump(sessions),
            "total": total,
            "message": f"Found {total} active session{_plural(total)}",
        }
    ), 200


@bp.delete("/<session_id>")
def revoke_session(session_id: str):
    """
    Revoke one of the caller's sessions.
    ---
    tags:
      - Sessions
    security:
      - Bearer: []
    parameters:
      -  in: path
         name: session_id
         type: string
         required: true
    responses:
      200:
        description: Revoked
      404:
        description: Session not found or already revoked
    """
    registry = current_app.extensions["auth_services"].registry
    result = registry.revoke_session(g.current_account.id, session_id)
    if not result.ok:
        return auth_error_response(result.error)
    return jsonify({"message": "Session revoked successfully"}), 200


@bp.delete("")
def revoke_other_sessions():
    """
    Revoke every session of the caller except the one behind this access token.
    ---
    tags:
      - Sessions
    security:
      - Bearer: []
    responses:
      200:
        description: Revoked
    """
    registry = current_app.extensions["auth_services"].registry
    count = registry.revoke_other_sessions(g.current_account.id, g.access_claims.get("sid"))
    return jsonify(
        {
            "message": f"Successfully ended {count} other session{_plural(count)}",
            "revoked_count": count,
        }
    ), 200
