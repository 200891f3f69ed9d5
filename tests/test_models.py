from datetime import timedelta

import pytest

from models import storage
from models.refresh_session import RefreshSession


class TestRefreshSession:
    def test_revocation_is_permanent(self, services, account):
        pair = services.issuer.issue(account)
        row = services.store.get(pair.session_id)
        row.revoked = True
        storage.save()

        with pytest.raises(ValueError):
            row.revoked = False

    def test_is_live(self, services, clock, account):
        row = services.store.get(services.issuer.issue(account).session_id)
        assert row.is_live(clock.now)
        assert not row.is_live(clock.now + timedelta(hours=25))

    def test_deleting_an_account_deletes_its_sessions(self, services, account):
        services.issuer.issue(account)
        services.issuer.issue(account)
        assert storage.count(RefreshSession) == 2

        storage.delete(account)
        storage.save()
        assert storage.count(RefreshSession) == 0


class TestAccount:
    def test_to_dict_hides_the_hash(self, account):
        data = account.to_dict()
        assert data["email"] == "alice@example.com"
        assert "password_hash" not in data

    def test_password_is_write_only(self, account):
        with pytest.raises(AttributeError):
            account.password
