from datetime import timedelta

from models import storage
from models.base_model import utcnow
from models.refresh_session import RefreshSession
from tests.helpers import login


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.get_json()["docs"] == "/apidocs/"


def test_api_docs(client):
    res = client.get("/swagger.json")
    assert res.status_code == 200
    assert "/api/v1/auth/login" in res.get_json()["paths"]


def test_unknown_route(client):
    res = client.get("/api/v1/nope")
    assert res.status_code == 404
    assert res.get_json()["error"] == "NOT_FOUND"


def test_purge_sessions_command(app, client, account):
    account_id = account.id
    login(client)
    session = storage.get_session()
    row = session.query(RefreshSession).filter(RefreshSession.account_id == account_id).one()
    row.expires_at = utcnow() - timedelta(minutes=1)
    storage.save()

    result = app.test_cli_runner().invoke(args=["purge-sessions"])
    assert result.exit_code == 0
    assert "Removed 1 expired and 0 revoked sessions" in result.output
