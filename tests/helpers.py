from datetime import timedelta

from models import storage
from models.account import Account
from models.base_model import utcnow
from utils.security import hash_password

PASSWORD = "CorrectHorse42!"

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_5 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.5 Mobile/15E148 Safari/604.1"
)


class FrozenClock:
    """A UTC clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_account(email: str, password: str = PASSWORD, is_admin: bool = False) -> Account:
    account = Account(
        email=email,
        username=email.split("@")[0],
        password_hash=hash_password(password),
        is_admin=is_admin,
        failed_login_attempts=0,
    )
    storage.new(account)
    storage.save()
    return account


def login(client, email="alice@example.com", password=PASSWORD, remember_me=False, user_agent=None):
    headers = {"User-Agent": user_agent} if user_agent else {}
    return client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password, "remember_me": remember_me},
        headers=headers,
    )


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
