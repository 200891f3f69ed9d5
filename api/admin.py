"""
Administrative account controls (admin accounts only):
- POST /admin/lockout-status
- POST /admin/unlock
- POST /admin/accounts/<account_id>/logout
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, abort, current_app

from models import storage
from models.account import Account
from models.schemas.account import EmailSchema, LockoutStatusSchema
from utils.guards import ADMIN, install_guards

bp = Blueprint("admin", __name__)
install_guards(bp, default=ADMIN)

email_schema = EmailSchema()
lockout_status_schema = LockoutStatusSchema()


@bp.post("/lockout-status")
def lockout_status():
    """
    Lockout state of an account.
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
    responses:
      200:
        description: OK
      403:
        description: Admin access required
    """
    data = email_schema.load(request.get_json(silent=True) or {})
    status = current_app.extensions["auth_services"].credentials.lockout_status(data["email"])
    return jsonify(lockout_status_schema.dump(status)), 200


@bp.post("/unlock")
def unlock():
    """
    Clear an account's lockout and failed-attempt counter.
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    responses:
      200:
        description: Unlocked
      404:
        description: No such account
    """
    data = email_schema.load(request.get_json(silent=True) or {})
    if not current_app.extensions["auth_services"].credentials.unlock(data["email"]):
        abort(404)
    return jsonify({"message": "Account unlocked"}), 200


@bp.post("/accounts/<account_id>/logout")
def force_logout(account_id: str):
    """
    End every session of an account.
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    responses:
      200:
        description: Sessions revoked
      404:
        description: No such account
    """
    if storage.get(Account, account_id) is None:
        abort(404)
    count = current_app.extensions["auth_services"].revocation.force_logout(account_id)
    return jsonify({"message": "Account logged out everywhere", "revoked_count": count}), 200
