"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and rotating, single-use refresh tokens
  backed by RefreshSession rows (services.tokens / services.rotation)
- Locks an account for 24h after 10 consecutive failed logins
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort, current_app
from marshmallow import ValidationError

from api.errors import auth_error_response
from models import storage
from models.account import Account
from models.schemas.account import RegisterSchema, LoginSchema, LogoutSchema, AccountOutSchema
from utils.devices import DeviceInfo
from utils.guards import AUTHENTICATED, bearer_token, install_guards
from utils.security import hash_password

bp = Blueprint("auth", __name__)
install_guards(bp, per_endpoint={"me": AUTHENTICATED})

REFRESH_COOKIE = "refresh_token"

register_schema = RegisterSchema()
login_schema = LoginSchema()
logout_schema = LogoutSchema()
account_out_schema = AccountOutSchema()


def auth_services():
    return current_app.extensions["auth_services"]


def device_info() -> DeviceInfo:
    return DeviceInfo(
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )


def presented_refresh_token(body: dict | None = None) -> str | None:
    """Authorization header first, then the cookie, then the JSON body."""
    token = bearer_token() or request.cookies.get(REFRESH_COOKIE)
    if not token and isinstance(body, dict):
        token = body.get("refresh_token")
    return token or None


@bp.post("/register")
def register():
    """
    Register a new account.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            username: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)

    session = storage.get_session()
    if session.query(Account).filter(Account.email == data["email"]).first():
        abort(409, description="A user with this email already exists.")

    account = Account(
        email=data["email"],
        username=data["username"].strip(),
        password_hash=hash_password(data["password"]),
        is_admin=False,
        failed_login_attempts=0,
    )
    storage.new(account)
    storage.save()

    return jsonify(
        {
            "user": account_out_schema.dump(account),
            "message": "Account created successfully. Please login to continue.",
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
             remember_me: { type: boolean }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
      423:
        description: Account locked
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    services = auth_services()
    result = services.credentials.validate(data["email"], data["password"])
    if not result.ok:
        return auth_error_response(result.error)

    account = result.value
    pair = services.issuer.issue(account, remember_me=data["remember_me"], device=device_info())
    body = pair.to_dict()
    body["user"] = account_out_schema.dump(account)
    return jsonify(body), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token for a new pair (rotation). The old token stops working.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Refresh token not provided
      401:
        description: Unauthorized
    """
    token = presented_refresh_token(request.get_json(silent=True))
    if not token:
        abort(400, description="Refresh token not provided")

    result = auth_services().rotation.refresh(token, device_info())
    if not result.ok:
        return auth_error_response(result.error)

    body = result.value.to_dict()
    body["message"] = "Token refreshed successfully"
    return jsonify(body), 200


@bp.post("/logout")
def logout():
    """
    Logout: revokes the presented refresh token, or all of its owner's sessions.
    Always succeeds.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             all_devices: { type: boolean }
    responses:
      200:
        description: Logged out
    """
    payload = request.get_json(silent=True)
    try:
        data = logout_schema.load(payload if isinstance(payload, dict) else {})
    except ValidationError:
        data = {"all_devices": False, "refresh_token": None}

    token = presented_refresh_token(data)
    all_devices = bool(data.get("all_devices"))
    if token:
        auth_services().revocation.logout(token, all_devices=all_devices)

    message = "Successfully logged out from all devices" if all_devices else "Successfully logged out"
    return jsonify({"message": message}), 200


@bp.get("/me")
def me():
    """
    Get current account info.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": account_out_schema.dump(g.current_account)}), 200
