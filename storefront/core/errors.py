# storefront/core/errors.py
# Иерархия ошибок приложения. Сервисы бросают их, обработчик в main.py
# превращает в JSON-ответ {"status": "fail" | "error", "message": ...}.


class AppError(Exception):
    """Базовая операционная ошибка с HTTP-кодом."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        # 4xx: ошибка клиента, 5xx: наша
        return "fail" if 400 <= self.status_code < 500 else "error"

    def to_dict(self) -> dict:
        return {"status": self.status, "message": self.message}


class NotFound(AppError):
    status_code = 404


class ValidationError(AppError):
    status_code = 400


class Forbidden(AppError):
    status_code = 403


class InvalidState(AppError):
    status_code = 400


class PaymentRequired(AppError):
    status_code = 402


class PaymentFailed(AppError):
    status_code = 400


class PaymentGatewayError(AppError):
    status_code = 502
