"""
Hata Yönetimi
Servis katmanı istisnaları ve HTTP karşılıkları
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class ServiceError(ValueError):
    """İş kuralı ihlali (400)"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Kayıt bulunamadı (404)"""
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(ServiceError):
    """Yetkisiz işlem (403)"""
    status_code = status.HTTP_403_FORBIDDEN


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Geçersiz istek"

    message = str(errors[0].get("msg", "Geçersiz istek"))
    # pydantic validator mesajlarının önekini at
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", [])), "msg": str(err.get("msg", ""))}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": _validation_message(exc), "errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Beklenmeyen hata: {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Sunucu hatası"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Uygulamaya hata handler'larını ekle"""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
