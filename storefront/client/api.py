# storefront/client/api.py
# HTTP-клиент к Storefront API для клиентской части (логин / логаут).
import requests


class StorefrontAPI:
    def __init__(self, base_url: str, timeout: float = 10, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token: str | None = None

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def login(self, email: str, password: str) -> dict:
        """Возвращает {"access_token", "token_type", "data": {"user": {...}}}."""
        response = self.session.post(
            f"{self.base_url}/api/auth/token",
            data={"username": email, "password": password},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def logout_user(self) -> dict:
        response = self.session.get(
            f"{self.base_url}/api/auth/logout",
            headers=self._headers(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()
