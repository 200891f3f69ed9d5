"""
Request guards as an explicit, ordered chain.

A guard is a zero-argument callable that inspects ``flask.request`` /
``flask.g`` and returns None to let the request through or a response to
stop it. install_guards() runs the chain for a blueprint's endpoints from
a ``before_request`` hook.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Sequence

from flask import Blueprint, current_app, g, request

from api.errors import error_response
from models import storage
from models.account import Account
from utils.security import TokenError

Guard = Callable[[], Optional[tuple]]


def bearer_token() -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    return token or None


def resolve_account():
    """Bearer access token -> g.current_account and g.access_claims."""
    token = bearer_token()
    if not token:
        return error_response("UNAUTHORIZED", "Missing or invalid Authorization header", 401)
    issuer = current_app.extensions["auth_services"].issuer
    try:
        claims = issuer.read_access_token(token)
    except TokenError:
        return error_response("UNAUTHORIZED", "Unauthorized", 401)

    account = storage.get(Account, claims.get("sub"))
    if account is None:
        return error_response("UNAUTHORIZED", "Unauthorized", 401)
    g.current_account = account
    g.access_claims = claims
    return None


def require_admin():
    """Capability check; must run after resolve_account."""
    account = getattr(g, "current_account", None)
    if account is None or not account.is_admin:
        return error_response("FORBIDDEN", "Admin access required", 403)
    return None


AUTHENTICATED: Sequence[Guard] = (resolve_account,)
ADMIN: Sequence[Guard] = (resolve_account, require_admin)


def run_guards(chain: Iterable[Guard]):
    for guard in chain:
        response = guard()
        if response is not None:
            return response
    return None


def install_guards(bp: Blueprint, default: Sequence[Guard] = (),
                   per_endpoint: Optional[Dict[str, Sequence[Guard]]] = None) -> None:
    """
    Attach a guard chain to ``bp``. ``per_endpoint`` maps view function
    names (without the blueprint prefix) to their own chain; every other
    endpoint of the blueprint gets ``default``.
    """
    chains = dict(per_endpoint or {})

    @bp.before_request
    def _guard_chain():
        endpoint = (request.endpoint or "").rsplit(".", 1)[-1]
        return run_guards(chains.get(endpoint, default))
