# storefront/services/paypal.py
# Клиент PayPal Orders API v2: создание и захват платежа.
import logging
import time

import requests

from storefront.core.config import settings
from storefront.core.errors import PaymentFailed, PaymentGatewayError

logger = logging.getLogger(__name__)

# Обновляем токен чуть раньше, чем он реально истечёт
TOKEN_EXPIRY_MARGIN = 60


class PayPalClient:
    """Тонкая обёртка над REST API PayPal (client credentials + checkout orders)."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str,
        currency: str = "USD",
        timeout: float = 15,
        session: requests.Session | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.currency = currency
        self.timeout = timeout
        self.session = session or requests.Session()
        self._token: str | None = None
        self._token_expires_at = 0.0

    def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token
        try:
            response = self.session.post(
                f"{self.base_url}/v1/oauth2/token",
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"PayPal authentication failed: {e}")
            raise PaymentGatewayError("Payment gateway authentication failed")
        payload = response.json()
        self._token = payload["access_token"]
        self._token_expires_at = time.monotonic() + int(payload.get("expires_in", 0)) - TOKEN_EXPIRY_MARGIN
        return self._token

    def _post(self, path: str, body: dict | None = None, headers: dict | None = None) -> dict:
        request_headers = {
            "Authorization": f"Bearer {self._access_token()}",
            "Content-Type": "application/json",
        }
        request_headers.update(headers or {})
        try:
            response = self.session.post(
                f"{self.base_url}{path}",
                json=body if body is not None else {},
                headers=request_headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            # 422 UNPROCESSABLE_ENTITY: PayPal отклонил операцию (например, INSTRUMENT_DECLINED)
            if e.response is not None and e.response.status_code == 422:
                logger.warning(f"PayPal rejected {path}: {e.response.text}")
                raise PaymentFailed("Payment failed")
            logger.error(f"PayPal request {path} failed: {e}")
            raise PaymentGatewayError("Payment gateway request failed")
        except requests.exceptions.RequestException as e:
            logger.error(f"PayPal request {path} failed: {e}")
            raise PaymentGatewayError("Payment gateway request failed")
        return response.json()

    def create_order(self, total: float) -> dict:
        """Создаёт checkout order с intent=CAPTURE на указанную сумму."""
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {"amount": {"currency_code": self.currency, "value": f"{total:.2f}"}},
            ],
        }
        result = self._post("/v2/checkout/orders", body, headers={"Prefer": "return=representation"})
        logger.info(f"PayPal order {result.get('id')} created for {total:.2f} {self.currency}")
        return result

    def capture_order(self, paypal_order_id: str) -> dict:
        """Захватывает ранее созданный checkout order. Бросает PaymentFailed, если не COMPLETED."""
        result = self._post(f"/v2/checkout/orders/{paypal_order_id}/capture")
        status = result.get("status")
        if status != "COMPLETED":
            logger.warning(f"PayPal capture {paypal_order_id} returned status {status}")
            raise PaymentFailed("Payment failed")
        logger.info(f"PayPal order {paypal_order_id} captured")
        return result


def capture_transaction_id(capture: dict) -> str | None:
    """Id транзакции захвата (purchase_units[0].payments.captures[0].id), иначе id заказа PayPal."""
    for unit in capture.get("purchase_units") or []:
        for item in (unit.get("payments") or {}).get("captures") or []:
            if item.get("id"):
                return item["id"]
    return capture.get("id")


def payer_email(capture: dict) -> str | None:
    return (capture.get("payer") or {}).get("email_address")


_client: PayPalClient | None = None


def get_paypal_client() -> PayPalClient:
    """Зависимость FastAPI: один клиент на процесс, чтобы переиспользовать токен."""
    global _client
    if _client is None:
        _client = PayPalClient(
            client_id=settings.PAYPAL_CLIENT_ID,
            client_secret=settings.PAYPAL_CLIENT_SECRET,
            base_url=settings.PAYPAL_API_BASE,
            currency=settings.PAYPAL_CURRENCY,
            timeout=settings.PAYPAL_TIMEOUT,
        )
    return _client
