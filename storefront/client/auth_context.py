# storefront/client/auth_context.py
# Сессия клиента: токен и профиль пользователя.
# Состояние живёт в явном объекте AuthContext, который передаётся потребителям,
# и зеркалируется в постоянное хранилище (storage.py).
import logging
from dataclasses import dataclass, fields
from typing import Callable

import requests

from storefront.client.api import StorefrontAPI

logger = logging.getLogger(__name__)

# Ключи в хранилище (совпадают с ключами localStorage веб-клиента)
STORAGE_KEYS = {
    "token": "token",
    "email": "email",
    "first_name": "firstName",
    "last_name": "lastName",
    "avatar_url": "avatarUrl",
    "role": "role",
}


@dataclass(frozen=True)
class SessionState:
    token: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    role: str | None = None

    @property
    def is_logged_in(self) -> bool:
        return bool(self.token)


ANONYMOUS = SessionState()


class AuthContext:
    """Два состояния: anonymous (нет токена) и authenticated (токен есть).

    Начальное состояние читается из storage синхронно, без сетевых запросов.
    Подписчики (subscribe) вызываются после каждого изменения состояния.
    """

    def __init__(self, storage, api=None):
        self.storage = storage
        self.api = api
        self._listeners: list[Callable[[SessionState], None]] = []
        self._state = self._read_storage()
        if self.api is not None:
            self.api.token = self._state.token

    @classmethod
    def connect(cls, storage, base_url: str, **api_options) -> "AuthContext":
        """Контекст с HTTP-клиентом StorefrontAPI к серверу base_url."""
        return cls(storage, api=StorefrontAPI(base_url, **api_options))

    def _read_storage(self) -> SessionState:
        return SessionState(**{attr: self.storage.get_item(key) for attr, key in STORAGE_KEYS.items()})

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        if self.api is not None:
            self.api.token = state.token
        for listener in list(self._listeners):
            listener(state)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_logged_in(self) -> bool:
        return self._state.is_logged_in

    @property
    def token(self) -> str | None:
        return self._state.token

    @property
    def user(self) -> dict | None:
        if not self.is_logged_in:
            return None
        return {f.name: getattr(self._state, f.name) for f in fields(SessionState) if f.name != "token"}

    def subscribe(self, listener: Callable[[SessionState], None]) -> Callable[[], None]:
        """Регистрирует слушателя, возвращает функцию отписки."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def login(
        self,
        token: str,
        first_name: str | None = None,
        last_name: str | None = None,
        avatar_url: str | None = None,
        email: str | None = None,
        role: str | None = None,
    ) -> None:
        state = SessionState(
            token=token,
            email=email,
            first_name=first_name,
            last_name=last_name,
            avatar_url=avatar_url,
            role=role,
        )
        for attr, key in STORAGE_KEYS.items():
            value = getattr(state, attr)
            if value is None:
                self.storage.remove_item(key)
            else:
                self.storage.set_item(key, value)
        self._set_state(state)

    def login_with_credentials(self, email: str, password: str) -> None:
        """Логин через API и сохранение полученного токена и профиля."""
        payload = self.api.login(email, password)
        user = payload.get("data", {}).get("user", {})
        self.login(
            payload["access_token"],
            first_name=user.get("firstName"),
            last_name=user.get("lastName"),
            avatar_url=user.get("avatarUrl"),
            email=user.get("email"),
            role=user.get("role"),
        )

    def clear_storage(self) -> None:
        """Локальная очистка без обращения к серверу."""
        for key in STORAGE_KEYS.values():
            self.storage.remove_item(key)
        self._set_state(ANONYMOUS)

    def logout(self) -> None:
        """Сообщает серверу о выходе; локальное состояние очищается в любом случае."""
        if self.api is not None:
            try:
                self.api.logout_user()
            except requests.exceptions.RequestException as e:
                logger.warning(f"Logout request failed: {e}")
        self.clear_storage()
