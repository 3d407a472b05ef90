import pytest
import requests

from storefront.client.api import StorefrontAPI
from storefront.client.auth_context import AuthContext
from storefront.client.storage import MemoryStorage

BASE = "https://shop.example.com"

LOGIN_PAYLOAD = {
    "access_token": "jwt-from-server",
    "token_type": "bearer",
    "data": {"user": {"email": "ann@example.com", "firstName": "Ann", "lastName": "Lee",
                      "avatarUrl": None, "role": "user"}},
}


class StubResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class StubSession:
    """Запоминает вызовы и отвечает заданными ответами."""

    def __init__(self, post_response=None, get_response=None):
        self.post_response = post_response
        self.get_response = get_response
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self.post_response

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self.get_response


def test_login_posts_oauth2_form():
    session = StubSession(post_response=StubResponse(LOGIN_PAYLOAD))
    api = StorefrontAPI(BASE + "/", timeout=3, session=session)

    assert api.login("ann@example.com", "secret123") == LOGIN_PAYLOAD

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", f"{BASE}/api/auth/token")
    assert kwargs["data"] == {"username": "ann@example.com", "password": "secret123"}
    assert kwargs["timeout"] == 3


def test_login_propagates_http_errors():
    session = StubSession(post_response=StubResponse({"status": "fail"}, status_code=401))
    api = StorefrontAPI(BASE, session=session)

    with pytest.raises(requests.exceptions.HTTPError):
        api.login("ann@example.com", "wrong-password")


def test_logout_sends_bearer_token():
    session = StubSession(get_response=StubResponse({"status": "success"}))
    api = StorefrontAPI(BASE, session=session)
    api.token = "jwt-1"

    assert api.logout_user() == {"status": "success"}

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", f"{BASE}/api/auth/logout")
    assert kwargs["headers"] == {"Authorization": "Bearer jwt-1"}


def test_logout_without_token_sends_no_header():
    session = StubSession(get_response=StubResponse({"status": "success"}))
    api = StorefrontAPI(BASE, session=session)

    api.logout_user()

    assert session.calls[0][2]["headers"] == {}


def test_logout_propagates_http_errors():
    session = StubSession(get_response=StubResponse({"status": "error"}, status_code=500))
    api = StorefrontAPI(BASE, session=session)

    with pytest.raises(requests.exceptions.HTTPError):
        api.logout_user()


def test_auth_context_round_trip_through_http_client():
    session = StubSession(
        post_response=StubResponse(LOGIN_PAYLOAD),
        get_response=StubResponse({"status": "success"}),
    )
    storage = MemoryStorage()
    ctx = AuthContext.connect(storage, BASE, session=session)

    ctx.login_with_credentials("ann@example.com", "secret123")

    assert ctx.token == "jwt-from-server"
    assert ctx.api.token == "jwt-from-server"
    assert storage.get_item("firstName") == "Ann"

    ctx.logout()

    assert session.calls[-1][2]["headers"] == {"Authorization": "Bearer jwt-from-server"}
    assert ctx.is_logged_in is False
    assert storage.get_item("token") is None
