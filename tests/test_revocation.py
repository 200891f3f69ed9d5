"""
Tests for logout and administrative force-logout.
"""
import pytest
from sqlalchemy.exc import OperationalError

from models.refresh_session import RevokeReason
from services.results import ErrorKind
from tests.helpers import make_account


class TestLogout:
    def test_revokes_only_the_presented_session(self, services, account):
        phone = services.issuer.issue(account)
        laptop = services.issuer.issue(account)

        assert services.revocation.logout(phone.refresh_token) == 1

        row = services.store.get(phone.session_id)
        assert row.revoked is True
        assert row.revoked_reason == RevokeReason.LOGOUT.value
        assert services.store.get(laptop.session_id).revoked is False
        assert services.rotation.refresh(phone.refresh_token).error.kind is ErrorKind.TOKEN_REVOKED
        assert services.rotation.refresh(laptop.refresh_token).ok

    def test_all_devices(self, services, account):
        pairs = [services.issuer.issue(account) for _ in range(3)]
        other = make_account("bob@example.com")
        bobs = services.issuer.issue(other)

        assert services.revocation.logout(pairs[0].refresh_token, all_devices=True) == 3

        for pair in pairs:
            row = services.store.get(pair.session_id)
            assert row.revoked is True
            assert row.revoked_reason == RevokeReason.LOGOUT_ALL_DEVICES.value
        assert services.store.get(bobs.session_id).revoked is False

    @pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
    def test_unusable_token_is_a_quiet_no_op(self, services, token):
        assert services.revocation.logout(token) == 0
        assert services.revocation.logout(token, all_devices=True) == 0

    def test_retired_token_cannot_log_out_other_devices(self, services, account):
        first = services.issuer.issue(account)
        other = services.issuer.issue(account)
        services.rotation.refresh(first.refresh_token)

        assert services.revocation.logout(first.refresh_token, all_devices=True) == 0
        assert services.store.get(other.session_id).revoked is False

    def test_logout_twice(self, services, account):
        pair = services.issuer.issue(account)
        assert services.revocation.logout(pair.refresh_token) == 1
        assert services.revocation.logout(pair.refresh_token) == 0
        assert services.store.get(pair.session_id).revoked_reason == RevokeReason.LOGOUT.value

    def test_expired_token_still_logs_out(self, services, clock, account):
        pair = services.issuer.issue(account)
        clock.advance(hours=25)
        assert services.revocation.logout(pair.refresh_token) == 1

    def test_storage_failure_is_swallowed(self, services, account, monkeypatch):
        pair = services.issuer.issue(account)

        def broken(*args, **kwargs):
            raise OperationalError("UPDATE refresh_sessions", {}, Exception("disk I/O error"))

        monkeypatch.setattr(services.store, "revoke", broken)
        assert services.revocation.logout(pair.refresh_token) == 0


class TestForceLogout:
    def test_revokes_every_live_session(self, services, account):
        pairs = [services.issuer.issue(account) for _ in range(2)]
        services.revocation.logout(pairs[0].refresh_token)

        assert services.revocation.force_logout(account.id) == 1
        row = services.store.get(pairs[1].session_id)
        assert row.revoked_reason == RevokeReason.MANUAL_REVOCATION.value
        # Earlier revocations keep their own reason
        assert services.store.get(pairs[0].session_id).revoked_reason == RevokeReason.LOGOUT.value

    def test_account_without_sessions(self, services, account):
        assert services.revocation.force_logout(account.id) == 0
